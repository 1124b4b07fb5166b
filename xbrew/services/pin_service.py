"""
Pin service for xbrew.

Orchestrates one run: classify the command line, resolve the formula
name and source URL, commit the formula into the override tap, then
run brew against the tap-qualified name.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Sequence

from ..domain import (
    InvocationRequest,
    LayoutVariant,
    PinResult,
    ResolvedSource,
    ResolvedTarget,
)
from ..exit_codes import DependencyMissingError
from ..infra.brew_client import BrewClient, which
from ..infra.git_client import GitClient, GitIdentity
from ..infra.http_client import FormulaHttpClient
from .classifier import classify
from .formula_name import extract_formula_name
from .installer import Installer
from .tap_service import FALLBACK_IDENTITY, TapService
from .url_resolver import DEFAULT_REPO_ROOT, UrlResolver

logger = logging.getLogger(__name__)

REQUIRED_TOOLS = ('brew', 'git')

LEGACY_LAYOUT_WARNING = "falling back to the legacy layout for the raw URL."
UNRELIABLE_NAME_TIP = "Tip: prefer URLs containing /Formula/<name>.rb for reliable extraction."


@dataclass
class PinOptions:
    """Settings for a run, resolved up front so services never read the environment."""
    default_tap: str
    repo_root: str = DEFAULT_REPO_ROOT
    formula_dir: str = "Formula"
    extension: str = ".rb"
    probe_retries: int = 2
    probe_retry_delay: float = 1.0
    probe_timeout: float = 10.0
    download_retries: int = 3
    download_retry_delay: float = 2.0
    download_timeout: float = 60.0
    git_timeout: int = 30
    fallback_identity: GitIdentity = field(default=FALLBACK_IDENTITY)

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> 'PinOptions':
        """Build options from a config dict as returned by load_config()."""
        general = config.get('general', {})
        source = config.get('source', {})
        network = config.get('network', {})
        git = config.get('git', {})
        return cls(
            default_tap=general['default_tap'],
            repo_root=source.get('repo_root', DEFAULT_REPO_ROOT),
            formula_dir=source.get('formula_dir', "Formula"),
            extension=source.get('extension', ".rb"),
            probe_retries=int(network.get('probe_retries', 2)),
            probe_retry_delay=float(network.get('probe_retry_delay', 1)),
            probe_timeout=float(network.get('probe_timeout', 10)),
            download_retries=int(network.get('download_retries', 3)),
            download_retry_delay=float(network.get('download_retry_delay', 2)),
            download_timeout=float(network.get('download_timeout', 60)),
            git_timeout=int(git.get('timeout', 30)),
            fallback_identity=GitIdentity(
                name=git.get('fallback_user_name', FALLBACK_IDENTITY.name),
                email=git.get('fallback_user_email', FALLBACK_IDENTITY.email),
            ),
        )

    def http_client(self) -> FormulaHttpClient:
        return FormulaHttpClient(
            probe_attempts=self.probe_retries,
            probe_retry_delay=self.probe_retry_delay,
            probe_timeout=self.probe_timeout,
            download_attempts=self.download_retries,
            download_retry_delay=self.download_retry_delay,
            download_timeout=self.download_timeout,
        )


def check_dependencies(tools: Sequence[str] = REQUIRED_TOOLS) -> None:
    """
    Raises:
        DependencyMissingError: for the first tool not found in PATH
    """
    for tool in tools:
        if which(tool) is None:
            raise DependencyMissingError(tool)


class PinService:
    """
    Installs a formula from an exact homebrew-core revision.

    Example:
        service = PinService(PinOptions(default_tap="alice/local"))
        result = service.run("install", ["doxygen", "d2267b9f..."])
        print(result.update.outcome)
    """

    def __init__(
        self,
        options: PinOptions,
        brew: Optional[BrewClient] = None,
        git: Optional[GitClient] = None,
        http: Optional[FormulaHttpClient] = None,
        echo: Optional[Callable[[str], None]] = None,
        on_plan: Optional[Callable[[ResolvedTarget], None]] = None
    ):
        """
        Initialize PinService.

        Args:
            options: Run settings
            brew: BrewClient instance (creates new if None)
            git: GitClient instance (creates new if None)
            http: FormulaHttpClient instance (built from options if None)
            echo: Callback for user-facing status lines
            on_plan: Called with the resolved target before anything is changed
        """
        self.options = options
        self.brew = brew or BrewClient()
        self.git = git or GitClient(timeout=options.git_timeout)
        self.http = http or options.http_client()
        self.echo = echo or logger.info
        self.on_plan = on_plan

        self.resolver = UrlResolver(
            self.http,
            repo_root=options.repo_root,
            formula_dir=options.formula_dir,
            extension=options.extension,
        )
        self.taps = TapService(
            brew=self.brew,
            git=self.git,
            http=self.http,
            fallback_identity=options.fallback_identity,
            formula_dir=options.formula_dir,
            extension=options.extension,
            echo=self.echo,
        )
        self.installer = Installer(brew=self.brew, echo=self.echo)

    def classify(self, action: str, args: Sequence[str]) -> InvocationRequest:
        return classify(action, args, self.options.default_tap)

    def resolve(self, request: InvocationRequest) -> ResolvedTarget:
        """
        Turn a classified request into a target with a canonical URL.

        Warnings for the legacy layout and for unreliable name
        extraction are logged and recorded on the target.
        """
        warnings = []

        if request.short_form:
            extracted = extract_formula_name(request.source, self.options.extension)
            formula = extracted.name
            if not extracted.reliable:
                warnings.append(
                    f"could not reliably extract formula name from URL. "
                    f"Using '{formula}' as formula name."
                )
                logger.warning(warnings[-1])
                logger.warning(UNRELIABLE_NAME_TIP)
            source = ResolvedSource(url=request.source, layout=LayoutVariant.DIRECT)
        else:
            formula = request.formula
            source = self.resolver.resolve(request.source, formula)
            if source.fallback_used:
                warnings.append(LEGACY_LAYOUT_WARNING)
                logger.warning(LEGACY_LAYOUT_WARNING)

        return ResolvedTarget.create(request, formula, source, tuple(warnings))

    def run(self, action: str, args: Sequence[str]) -> PinResult:
        """
        Execute the whole pipeline.

        Args:
            action: 'install' or 'reinstall'
            args: Remaining positional tokens

        Returns:
            PinResult

        Raises:
            CommandError subclasses; see xbrew.exit_codes
        """
        request = self.classify(action, args)
        target = self.resolve(request)

        if self.on_plan:
            self.on_plan(target)

        update = self.taps.update(target)
        install = self.installer.run(target.action, target.qualified_name)

        return PinResult(target=target, update=update, install=install)
