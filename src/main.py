"""Process entry point: configuration, session registry, and server lifecycle."""

import logging
import signal
import sys
import time
from typing import Optional

from app_config import AppConfigurationError, load_app_config
from pomodoro import SessionRegistry
from runtime import RuntimeEventPublisher, TickDependencies, TickProcessor
from server import ServerConfig, ServerConfigurationError, SessionServer


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """Configure logging for the application."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    return logging.getLogger("calabash")


def build_registry(publisher: RuntimeEventPublisher) -> SessionRegistry:
    """Create the session registry wired to publish every tick."""
    tick_processor = TickProcessor(
        TickDependencies(
            logger=logging.getLogger("runtime.ticks"),
            ui=publisher,
        )
    )
    return SessionRegistry(
        on_tick=tick_processor.handle_tick,
        logger=logging.getLogger("pomodoro.registry"),
    )


def main(argv: Optional[list[str]] = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    config_path = args[0] if args else None

    logger = setup_logging()
    try:
        app_config = load_app_config(config_path)
        server_config = ServerConfig.from_settings(app_config.server)
    except (AppConfigurationError, ServerConfigurationError) as error:
        logger.error("Configuration error: %s", error)
        return 1

    logging.getLogger().setLevel(app_config.logging.level)
    logger.info("Loaded configuration from %s", app_config.source_file)

    publisher = RuntimeEventPublisher(None)
    registry = build_registry(publisher)
    server = SessionServer(
        config=server_config,
        registry=registry,
        logger=logging.getLogger("server"),
    )

    shutdown = False

    def handle_signal(signum, frame) -> None:
        del frame
        nonlocal shutdown
        logger.info("Signal %s received, stopping.", signal.Signals(signum).name)
        shutdown = True

    try:
        server.start()
        publisher.attach(server)
        logger.info("Press Ctrl+C to stop.")

        signal.signal(signal.SIGINT, handle_signal)
        signal.signal(signal.SIGTERM, handle_signal)

        while not shutdown:
            time.sleep(0.2)
    except RuntimeError as error:
        logger.error("Server startup failed: %s", error)
        return 1
    except KeyboardInterrupt:
        logger.info("Stopping by user request.")
    finally:
        publisher.attach(None)
        registry.shutdown()
        server.stop()

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
