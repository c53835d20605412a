"""Main application entry point for Omi Recorder."""

import sys
import asyncio
import argparse
import logging
from pathlib import Path

from .auto_mode import run_auto_mode
from .config import RecorderConfig
from .exceptions import RecorderError
from .recognition import ENGINE_BACKENDS, create_engine
from .services.session_controller import RecognitionSessionController
from .ui.recording_screen import RecordingScreen

logger = logging.getLogger(__name__)


def setup_logging(config: RecorderConfig, level: str = "INFO") -> None:
    """Set up logging configuration from YAML config."""
    log_file_path = config.get('logging.file_path', 'data/logs/omirecorder.log')
    console_output = config.get('logging.console_output', True)

    # Create logs directory if it doesn't exist
    log_dir = Path(log_file_path).parent
    log_dir.mkdir(parents=True, exist_ok=True)

    handlers = []

    # File handler - always write to file
    file_handler = logging.FileHandler(log_file_path)
    file_handler.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
    )
    file_handler.setFormatter(file_formatter)
    handlers.append(file_handler)

    # Console handler - only if enabled in config
    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.WARNING)  # Only show warnings and above on console
        console_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        console_handler.setFormatter(console_formatter)
        handlers.append(console_handler)

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    logger.info("=" * 50)
    logger.info("Omi Recorder starting up")
    logger.info(f"Log file: {log_file_path}")
    logger.info(f"Log level set to: {level}")
    logger.info("=" * 50)


def build_controller(config: RecorderConfig) -> RecognitionSessionController:
    """Wire the configured engine into a session controller."""
    engine = create_engine(config)
    return RecognitionSessionController(
        engine=engine,
        recognition_config=config.get_recognition_config(),
        timer_interval=config.get_timer_interval(),
    )


async def _run(config: RecorderConfig, auto: bool, duration: int) -> None:
    controller = build_controller(config)
    if auto:
        await run_auto_mode(controller, duration)
    else:
        await RecordingScreen(controller).run()


def main() -> None:
    """Main entry point for Omi Recorder."""
    parser = argparse.ArgumentParser(
        description="Omi Recorder - voice to text transcription",
        epilog="Keys: 1/space=Start recording, 2/space=Stop recording, c=Clear log, q=Quit"
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration YAML file (default: built-in defaults)"
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (default: from config, else INFO)"
    )

    parser.add_argument(
        "--engine",
        type=str,
        choices=ENGINE_BACKENDS,
        help="Recognition backend (overrides config)"
    )

    parser.add_argument(
        "--auto",
        action="store_true",
        help="Run in automatic mode: start recording, record for specified duration, then stop and exit"
    )

    parser.add_argument(
        "--duration",
        type=int,
        default=10,
        help="Duration in seconds for auto mode recording (default: 10)"
    )

    parser.add_argument(
        "--version",
        action="version",
        version="Omi Recorder v0.1.0"
    )

    args = parser.parse_args()

    try:
        config = RecorderConfig(args.config)
        if args.engine:
            config.set('engine.backend', args.engine)
        setup_logging(config, args.log_level or config.get('logging.level', 'INFO'))
        asyncio.run(_run(config, args.auto, args.duration))
    except KeyboardInterrupt:
        print("\n👋 Goodbye!")
    except RecorderError as e:
        print(f"❌ Error: {e.detail}")
        logging.error(f"Application error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
