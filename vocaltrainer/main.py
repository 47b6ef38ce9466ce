"""Main application entry point for the vocal trainer."""

import sys
import time
import argparse
import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.live import Live
from rich.table import Table

from vocaltrainer.models.session import SessionState
from vocaltrainer.models.state import PublishedState
from vocaltrainer.services.session_controller import SessionController

from .config import VocalTrainerConfig

logger = logging.getLogger(__name__)

REFRESH_SECONDS = 0.2


class Trainer:

    def __init__(self, config_path: Optional[str], log_level: Optional[str] = None):
        # Load configuration
        self.config = VocalTrainerConfig(config_path)
        # Set up logging (command line overrides config)
        setup_logging(self.config, log_level or self.config.get('logging.level', 'INFO'))
        self.console = Console()
        self.controller: Optional[SessionController] = None

    def init(self):
        logger.info("Initializing session controller...")
        sample_rate = self.config.get('audio.sample_rate', 44100)
        chunk_size = self.config.get('audio.chunk_size', 1024)
        logger.info(f"Audio settings: {sample_rate}Hz, {chunk_size} samples/chunk, "
                    f"{chunk_size / sample_rate * 1000:.1f}ms per buffer")
        self.controller = SessionController.from_config(self.config)

    def run_breath(self):
        """Run the breath challenge until the countdown ends."""
        self.controller.start_breath_session()
        self._watch(until_idle=True)

    def run_pitch(self, duration: Optional[int]):
        """Run the pitch readout for ``duration`` seconds, or until interrupted."""
        self.controller.start_pitch_session()
        deadline = time.monotonic() + duration if duration else None
        self._watch(deadline=deadline)

    def show_history(self, limit: int):
        history = self.controller.history
        if not history:
            self.console.print("No breath results recorded yet.", style="yellow")
            return
        table = Table(title="Breath history (most recent first)")
        table.add_column("#", justify="right")
        table.add_column("Best sustain", justify="right")
        for index, seconds in enumerate(history[:limit], start=1):
            table.add_row(str(index), f"{seconds:.1f}s")
        self.console.print(table)

    def _watch(self, until_idle: bool = False, deadline: Optional[float] = None):
        # Give the dispatcher a chance to leave IDLE before polling for it
        self.controller.dispatcher.join()
        with Live(render_state(self.controller.state), console=self.console,
                  refresh_per_second=1 / REFRESH_SECONDS) as live:
            while True:
                state = self.controller.state
                live.update(render_state(state))
                if until_idle and state.session_state is SessionState.IDLE:
                    break
                if deadline is not None and time.monotonic() >= deadline:
                    break
                time.sleep(REFRESH_SECONDS)

    def cleanup(self):
        if self.controller is not None:
            self.controller.shutdown()
            best = self.controller.best_breath
            if best > 0:
                self.console.print(f"Best sustain this session: {best:.1f}s", style="green")


def render_state(state: PublishedState) -> Table:
    """Render the published state as a two-column table."""
    table = Table(show_header=False, box=None)
    table.add_column(style="bold cyan")
    table.add_column()
    table.add_row("Session", state.session_state.value)
    if state.session_state is SessionState.RUNNING_PITCH:
        table.add_row("Note", state.current_pitch)
        table.add_row("Frequency", f"{state.frequency:.1f} Hz")
    else:
        table.add_row("Remaining", f"{state.remaining_time}s")
        table.add_row("Current", f"{state.current_breath_seconds:.1f}s")
        table.add_row("Best", f"{state.best_breath:.1f}s")
    bar_width = int(min(1.0, max(0.0, state.audio_level)) * 30)
    table.add_row("Level", "#" * bar_width)
    return table


def setup_logging(config, level: str = "INFO") -> None:
    """Set up logging configuration from YAML config."""
    log_file_path = config.get('logging.file_path', 'data/logs/vocaltrainer.log')
    console_output = config.get('logging.console_output', True)

    # Create logs directory if it doesn't exist
    log_dir = Path(log_file_path).parent
    log_dir.mkdir(parents=True, exist_ok=True)

    handlers = []

    # File handler - always write to file
    file_handler = logging.FileHandler(log_file_path)
    file_handler.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(threadName)s - %(funcName)s:%(lineno)d - %(message)s'
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
    logger.info("Vocal trainer starting up")
    logger.info(f"Log file: {log_file_path}")
    logger.info(f"Log level set to: {level}")
    logger.info("=" * 50)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Vocal trainer - breath challenge and pitch lab",
        epilog="Press Ctrl-C to stop an exercise early; the result is still recorded."
    )

    parser.add_argument(
        "mode",
        choices=["breath", "pitch", "history"],
        help="breath: one-minute breath challenge, pitch: live note readout, "
             "history: list past breath results"
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration YAML file (default: built-in settings)"
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (overrides config)"
    )

    parser.add_argument(
        "--duration",
        type=int,
        help="Seconds to run the pitch readout (default: until Ctrl-C)"
    )

    parser.add_argument(
        "--limit",
        type=int,
        default=10,
        help="Number of history entries to show (default: 10)"
    )

    parser.add_argument(
        "--version",
        action="version",
        version="vocaltrainer 0.1.0"
    )
    return parser


def main() -> None:
    """Main entry point for the vocal trainer."""
    args = build_parser().parse_args()

    trainer = Trainer(args.config, args.log_level)
    try:
        trainer.init()
        if args.mode == "breath":
            trainer.run_breath()
        elif args.mode == "pitch":
            trainer.run_pitch(args.duration)
        else:
            trainer.show_history(args.limit)
    except KeyboardInterrupt:
        trainer.console.print("\nStopped.")
    except Exception as e:
        trainer.console.print(f"Error: {e}", style="red")
        logging.error(f"Application error: {e}", exc_info=True)
        trainer.cleanup()
        sys.exit(1)
    trainer.cleanup()


if __name__ == "__main__":
    main()
