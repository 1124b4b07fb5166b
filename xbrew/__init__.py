"""
xbrew - Install or reinstall a Homebrew formula from a specific commit.

xbrew fetches a formula file at an exact homebrew-core revision, commits
it into a local tap and installs the tap-qualified formula, so older
versions can be installed, kept and shared.

Quick Start:
    from xbrew.config import load_config
    from xbrew.services import PinService, PinOptions

    service = PinService(PinOptions.from_config(load_config()))
    result = service.run("install", ["doxygen", "d2267b9f2ad247bc9c8273eb755b39566a474a70"])
    print(result.update.outcome)

Layers:
    domain   - requests, layout variants, results (no I/O)
    infra    - brew, git and HTTP clients
    services - classification, resolution, tap management, install
"""

__version__ = "0.1.0"
