import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Union

import click
import sentry_sdk

from .. import __version__
from .._crosswalk.record import SoftwareCategory
from ..console import console, print_diagnostics, print_final_failure, print_summary_table, print_written_files
from ..exceptions import ConfigurationError, FileProcessingError, ParseError
from ..logging_config import logger, set_log_level
from ..orchestrator import CrosswalkResult, crosswalk
from ..versioning import VERSION_PARTS, bump_version

RSMD_VERSION = __version__

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


@dataclass
class Config:
    """Configuration for one crosswalk or bump run."""

    path: str = "."
    category: Optional[str] = None
    keywords: Optional[List[str]] = None
    build: Optional[str] = None
    build_from_readme: bool = False
    update: bool = False
    offline: bool = False
    log_level: str = "INFO"

    def validate(self) -> None:
        """
        Validate configuration settings.

        Raises:
            ConfigurationError: If configuration is invalid
        """
        if not Path(self.path).is_dir():
            raise ConfigurationError(f"Project directory not found: {self.path}")
        if self.build and self.build_from_readme:
            raise ConfigurationError("Please provide only one of: --build or --build-from-readme")
        if self.category is not None:
            self.category = self.category.lower()
            if self.category not in SoftwareCategory.values():
                raise ConfigurationError(
                    f"Invalid category '{self.category}'. Expected one of: {', '.join(SoftwareCategory.values())}"
                )
        if self.log_level.upper() not in LOG_LEVELS:
            raise ConfigurationError(f"Invalid log level '{self.log_level}'. Expected one of: {', '.join(LOG_LEVELS)}")

    @property
    def build_policy(self) -> Union[bool, str]:
        """The build-instructions policy understood by crosswalk()."""
        if self.build_from_readme:
            return True
        return self.build or False


def evaluate_boolean(value: str) -> bool:
    """
    Evaluate string values as boolean.

    Args:
        value: String value to evaluate

    Returns:
        Boolean result
    """
    return value.lower() in ["true", "yes", "yeah", "1"]


def _parse_keywords(value: Optional[str]) -> Optional[List[str]]:
    if value is None:
        return None
    return [keyword.strip() for keyword in value.split(",") if keyword.strip()]


def build_config(
    path: Optional[str] = None,
    category: Optional[str] = None,
    keywords: Optional[List[str]] = None,
    build: Optional[str] = None,
    build_from_readme: Optional[bool] = None,
    update: Optional[bool] = None,
    offline: Optional[bool] = None,
    log_level: Optional[str] = None,
) -> Config:
    """
    Build configuration from CLI arguments with environment variable fallbacks.

    CLI arguments take precedence; unset arguments fall back to RSMD_PATH,
    RSMD_CATEGORY, RSMD_KEYWORDS (comma separated), RSMD_BUILD,
    RSMD_BUILD_FROM_README, RSMD_UPDATE, RSMD_OFFLINE and LOG_LEVEL.

    Raises:
        ConfigurationError: If configuration is invalid
    """
    config = Config(
        path=path or os.getenv("RSMD_PATH", "."),
        category=category or os.getenv("RSMD_CATEGORY") or None,
        keywords=list(keywords) if keywords else _parse_keywords(os.getenv("RSMD_KEYWORDS")),
        build=build or os.getenv("RSMD_BUILD") or None,
        build_from_readme=(
            build_from_readme
            if build_from_readme is not None
            else evaluate_boolean(os.getenv("RSMD_BUILD_FROM_README", "False"))
        ),
        update=update if update is not None else evaluate_boolean(os.getenv("RSMD_UPDATE", "False")),
        offline=offline if offline is not None else evaluate_boolean(os.getenv("RSMD_OFFLINE", "False")),
        log_level=(log_level or os.getenv("LOG_LEVEL", "INFO")).upper(),
    )
    config.validate()
    return config


def initialize_sentry() -> None:
    """
    Initialize Sentry for error tracking.

    Only active when RSMD_SENTRY_DSN is set and TELEMETRY is not disabled.
    """
    if not evaluate_boolean(os.getenv("TELEMETRY", "true")):
        logger.debug("Telemetry disabled")
        return
    sentry_dsn = os.getenv("RSMD_SENTRY_DSN")
    if not sentry_dsn:
        return

    def before_send(event, hint):
        """
        Filter events before sending to Sentry.
        Don't send malformed-input or configuration errors - these are user errors.
        """
        if "exc_info" in hint:
            exc_type, exc_value, tb = hint["exc_info"]
            if isinstance(exc_value, (ParseError, ConfigurationError)):
                return None
        return event

    sentry_sdk.init(
        dsn=sentry_dsn,
        release=f"rsmd@{RSMD_VERSION}",
        send_default_pii=False,
        traces_sample_rate=0.0,
        before_send=before_send,
    )


def print_result(result: CrosswalkResult) -> None:
    record = result.record
    print_summary_table(
        "Canonical Metadata",
        [
            ("Name", record.name),
            ("Version", record.version),
            ("License", record.license_id),
            ("Authors", ", ".join(p.name for p in record.authors if p.name)),
            ("Keywords", ", ".join(record.keywords)),
            ("Category", record.category),
            ("Repository", record.repository_url),
            ("Operating systems", ", ".join(record.operating_systems)),
            ("First release", record.first_release_date),
            ("Last modified", record.date_modified),
        ],
    )
    print_written_files(result.written)
    print_diagnostics(result.diagnostics)


def run_command(config: Config, action: Callable[[Config], CrosswalkResult]) -> None:
    """
    Run a crosswalk-based action and exit with its status.

    Exit code 1 on malformed files, configuration problems, write failures
    or any error diagnostic.
    """
    initialize_sentry()
    set_log_level(config.log_level)

    try:
        result = action(config)
    except (ParseError, ConfigurationError, FileProcessingError) as e:
        logger.error(str(e))
        print_final_failure(str(e))
        sys.exit(1)

    print_result(result)
    if not result.ok:
        print_final_failure(f"{len(result.diagnostics.errors)} metadata error(s) need attention")
        sys.exit(1)
    console.print("[success]✓ Metadata is consistent[/success]")


def _handle_config_error(build: Callable[[], Config]) -> Config:
    try:
        return build()
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        print_final_failure(str(e))
        sys.exit(1)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(RSMD_VERSION, "--version", "-V", prog_name="rsmd", message="%(prog)s %(version)s")
def cli() -> None:
    """Keep research software metadata consistent across pyproject.toml,
    LICENSE, codemeta.json, .zenodo.json and source headers.

    Options can also be set with environment variables (RSMD_PATH,
    RSMD_CATEGORY, RSMD_KEYWORDS, RSMD_BUILD, RSMD_UPDATE, RSMD_OFFLINE,
    LOG_LEVEL).
    """


@cli.command("crosswalk", context_settings=CONTEXT_SETTINGS)
@click.option("--path", "path", default=None, help="Project directory. [env: RSMD_PATH, default: .]")
@click.option(
    "--category",
    type=click.Choice(SoftwareCategory.values(), case_sensitive=False),
    default=None,
    help="Research software category. [env: RSMD_CATEGORY]",
)
@click.option(
    "--keyword",
    "keywords",
    multiple=True,
    help="Keyword; repeat to give several. Replaces the stored keywords. [env: RSMD_KEYWORDS]",
)
@click.option("--build", "build", default=None, help="Build instructions to record. [env: RSMD_BUILD]")
@click.option(
    "--build-from-readme",
    is_flag=True,
    default=False,
    help="Point build instructions at the README. [env: RSMD_BUILD_FROM_README]",
)
@click.option(
    "--update/--no-update",
    default=None,
    help="Propagate the pyproject.toml version even if codemeta.json disagrees. [env: RSMD_UPDATE]",
)
@click.option("--offline/--online", default=None, help="Skip ROR, ORCID and PyPI lookups. [env: RSMD_OFFLINE]")
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default=None,
    help="Logging verbosity. [env: LOG_LEVEL, default: INFO]",
)
def crosswalk_command(path, category, keywords, build, build_from_readme, update, offline, log_level) -> None:
    """Reconcile every metadata file and rewrite the ones that disagree."""
    config = _handle_config_error(
        lambda: build_config(
            path=path,
            category=category,
            keywords=list(keywords),
            build=build,
            build_from_readme=build_from_readme or None,
            update=update,
            offline=offline,
            log_level=log_level,
        )
    )
    run_command(
        config,
        lambda c: crosswalk(
            c.path,
            category=c.category,
            keywords=c.keywords,
            build=c.build_policy,
            update=c.update,
            offline=c.offline,
        ),
    )


@cli.command("bump", context_settings=CONTEXT_SETTINGS)
@click.argument("part", type=click.Choice(VERSION_PARTS, case_sensitive=False))
@click.option("--path", "path", default=None, help="Project directory. [env: RSMD_PATH, default: .]")
@click.option("--offline/--online", default=None, help="Skip ROR, ORCID and PyPI lookups. [env: RSMD_OFFLINE]")
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default=None,
    help="Logging verbosity. [env: LOG_LEVEL, default: INFO]",
)
def bump_command(part, path, offline, log_level) -> None:
    """Increase the major, minor or patch version and propagate it."""
    config = _handle_config_error(lambda: build_config(path=path, offline=offline, log_level=log_level))
    run_command(config, lambda c: bump_version(part.lower(), c.path, offline=c.offline))


def main() -> None:
    """Console script entry point."""
    cli()


if __name__ == "__main__":
    main()
