"""Command-line / GitHub Action entrypoint for mirrorsync."""

import json
import logging
import os
import sys
from typing import Mapping, Optional, Sequence

from .config import Config, load_configuration, validate_configuration
from .credentials import setup_ssh_key
from .git_sync import GitExecutor, SyncOrchestrator, SyncReport
from .masking import mask_secrets
from .platform import validate_git_availability

EXIT_CONFIGURATION_ERROR = 2


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

SYNC_LOGGERS = [
    'mirrorsync.startup',
    'mirrorsync.sync',
    'mirrorsync.git_sync',
    'mirrorsync.error_handler',
    'mirrorsync.credentials',
]


class SyncLogFormatter(logging.Formatter):
    """Prefixes the record's operation, if any, and masks secrets in the final line."""

    def __init__(self, secrets: Sequence[str] = ()):
        super().__init__(LOG_FORMAT, LOG_DATE_FORMAT)
        self.secrets = list(secrets)

    def formatMessage(self, record):
        if hasattr(record, 'operation'):
            record.message = f"[{record.operation}] {record.message}"
        return mask_secrets(super().formatMessage(record), self.secrets)


def setup_logging(config: Config) -> None:
    """Route the mirrorsync loggers through SyncLogFormatter at the configured level."""
    level = getattr(logging, config.log_level)
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    formatter = SyncLogFormatter(config.secrets)
    for logger_name in SYNC_LOGGERS:
        logger = logging.getLogger(logger_name)
        logger.setLevel(level)

        if not logger.handlers:
            logger.addHandler(logging.StreamHandler())
            logger.propagate = False
        for handler in logger.handlers:
            handler.setFormatter(formatter)


def write_report(report: SyncReport, config: Config, environ: Mapping[str, str]) -> None:
    """Write the JSON report file and the GitHub Actions step output, when configured."""
    logger = logging.getLogger('mirrorsync.startup')

    if config.report_file is not None:
        config.report_file.parent.mkdir(parents=True, exist_ok=True)
        config.report_file.write_text(json.dumps(report.to_dict(), indent=2))
        logger.info(f"Report written to {config.report_file}")

    github_output = environ.get("GITHUB_OUTPUT")
    if github_output:
        with open(github_output, "a") as f:
            f.write(f"result={'success' if report.success else 'failure'}\n")
            f.write(f"degraded={str(report.degraded).lower()}\n")


def run_cli(environ: Optional[Mapping[str, str]] = None, executor: Optional[GitExecutor] = None) -> int:
    """
    Load configuration, run one sync and return the process exit code.

    Returns:
        0 on success, 1 if any branch or required phase failed, 2 on configuration errors
    """
    try:
        config = load_configuration(environ)
    except ValueError as e:
        logging.basicConfig(level=logging.INFO)
        logging.getLogger('mirrorsync.startup').error(str(e))
        return EXIT_CONFIGURATION_ERROR

    environ = os.environ if environ is None else environ
    setup_logging(config)
    startup_logger = logging.getLogger('mirrorsync.startup')

    problems = validate_configuration(config)
    for problem in problems:
        if problem.startswith("ERROR"):
            startup_logger.error(problem)
        else:
            startup_logger.warning(problem)
    if any(problem.startswith("ERROR") for problem in problems):
        return EXIT_CONFIGURATION_ERROR

    if executor is None:
        git_available, git_error = validate_git_availability()
        if not git_available:
            startup_logger.error(git_error)
            return EXIT_CONFIGURATION_ERROR

    if config.ssh_private_key:
        setup_ssh_key(config.ssh_private_key)

    report = SyncOrchestrator(config, executor).run()
    write_report(report, config, environ)
    return report.exit_code


def main():
    """Main entry point for the mirrorsync command."""
    try:
        sys.exit(run_cli())
    except KeyboardInterrupt:
        logging.getLogger('mirrorsync.startup').info("Sync interrupted by user (Ctrl+C)")
        sys.exit(130)


if __name__ == "__main__":
    main()
