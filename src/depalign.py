"""DepAlign - Cross-module dependency version alignment

    Reads a build description, collects every module's dependencies
    concurrently, aligns them through the REST alignment service and writes
    manipulation.json for downstream build rewriting.

    Returns:
        int: Exit code
"""
import logging
import os
import sys

from args import parse_args
from build_description import load_build_description
from cli_config import build_configuration
from common.errors import AlignmentError, AlignmentServiceError, ConfigurationError, ManipulationFileError
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from constants import Constants, ExitCodes
from alignment.task import run_alignment


def _setup_logging(args) -> None:
    """Configure logging based on CLI arguments."""
    # Honor CLI --loglevel by passing it to centralized logger via env
    if getattr(args, "LOG_LEVEL", None):
        os.environ[Constants.ENV_LOG_LEVEL] = str(args.LOG_LEVEL).upper()
    configure_logging()

    log_file = getattr(args, "LOG_FILE", None)
    if log_file:
        handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setFormatter(logging.Formatter(Constants.LOG_FORMAT))
        logging.getLogger().addHandler(handler)


def run(args) -> int:
    """Run one alignment and map failures onto exit codes."""
    logger = logging.getLogger(__name__)
    try:
        configuration = build_configuration(args)
        description = load_build_description(args.BUILD)
        root_dir = args.OUTPUT_DIR or description.root_dir
        modules = description.modules
        if is_debug_enabled(logger):
            logger.debug(
                "Starting alignment",
                extra=extra_context(
                    event="function_entry",
                    component="cli",
                    action="run_alignment",
                    count=len(modules),
                    target=root_dir,
                )
            )
        model = run_alignment(
            root=modules[0],
            modules=modules,
            skeleton=description.skeleton_model(),
            port=description,
            configuration=configuration,
            root_dir=root_dir,
            repositories=description.module_repositories,
            workers=args.WORKERS,
        )
    except ConfigurationError as e:
        logger.error("Configuration error: %s", e)
        return ExitCodes.FILE_ERROR.value
    except ManipulationFileError as e:
        logger.error("Manipulation file error: %s", e)
        return ExitCodes.FILE_ERROR.value
    except AlignmentServiceError as e:
        logger.error("Alignment service error: %s", e)
        return ExitCodes.CONNECTION_ERROR.value
    except AlignmentError as e:
        logger.error("Alignment failed: %s", e)
        return ExitCodes.ALIGNMENT_ERROR.value

    aligned = model.get_all_aligned_dependencies()
    logger.info("Alignment complete: %d aligned dependencies, project version %s", len(aligned), model.version)
    return ExitCodes.SUCCESS.value


def main(argv=None):
    """Main function of the program."""
    args = parse_args(argv)
    _setup_logging(args)
    logging.info("Arguments parsed.")
    sys.exit(run(args))


if __name__ == "__main__":
    main()
