import logging
import signal
import sys
from typing import Optional

from app_config import (
    AppConfigurationError,
    load_app_config,
    log_level,
    resolve_config_path,
)
from cycle import EventBus
from runtime import (
    CycleConfig,
    CycleConfigurationError,
    Orchestrator,
    RuntimeBootstrap,
    RuntimeEngine,
    RuntimeHooks,
)
from server import ServerConfigurationError, UIServer, UIServerConfig
from stats import StatisticsRecorder


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """Configure logging for the application."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    return logging.getLogger("eyecare_app")


def setup_signal_handlers(engine: RuntimeEngine) -> None:
    """Set up graceful shutdown on SIGTERM and SIGINT."""
    logger = logging.getLogger("eyecare_app")

    def signal_handler(signum: int, frame) -> None:
        del frame
        logger.info("%s received, stopping...", signal.Signals(signum).name)
        engine.stop()

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)


def main() -> int:
    """Run the eye-care work/break cycle."""
    logger = setup_logging(level=logging.INFO)

    try:
        config_path = resolve_config_path()
        app_config = load_app_config(str(config_path))
        cycle_config = CycleConfig.from_settings(app_config.timer, app_config.activities)
    except (AppConfigurationError, CycleConfigurationError) as error:
        logger.error("App configuration error: %s", error)
        return 1

    logging.getLogger().setLevel(log_level(app_config.logging))
    logger.info("Loaded runtime config: %s", config_path)

    bus = EventBus(logger=logging.getLogger("cycle.events"))
    orchestrator = Orchestrator(
        cycle_config,
        bus=bus,
        logger=logging.getLogger("runtime.orchestrator"),
    )

    statistics: Optional[StatisticsRecorder] = None
    if app_config.statistics.enabled:
        statistics = StatisticsRecorder(
            bus,
            max_records=app_config.statistics.max_records,
            logger=logging.getLogger("stats"),
        )

    ui_server: Optional[UIServer] = None
    ui_server_config: Optional[UIServerConfig] = None
    try:
        ui_server_config = UIServerConfig.from_settings(app_config.ui_server)
    except ServerConfigurationError as error:
        logger.error("UI server configuration error: %s", error)
        logger.warning("Continuing without UI server.")

    if ui_server_config and ui_server_config.enabled:
        try:
            ui_server = UIServer(
                config=ui_server_config,
                logger=logging.getLogger("ui_server"),
            )
            logger.info("Starting UI server...")
            ui_server.start(timeout_seconds=5.0)
            logger.info(
                "UI server ready at http://%s:%d",
                ui_server.host,
                ui_server.port,
            )
        except Exception as error:
            logger.error("UI server startup failed: %s", error)
            logger.warning("Continuing without UI server.")
            ui_server = None

    engine = RuntimeEngine(
        RuntimeBootstrap(
            logger=logging.getLogger("runtime"),
            orchestrator=orchestrator,
            ui_server=ui_server,
            statistics=statistics,
            statistics_export_file=app_config.statistics.export_file,
            hooks=RuntimeHooks(setup_signal_handlers=setup_signal_handlers),
        )
    )
    if ui_server is not None:
        ui_server.set_command_sink(engine.submit)

    return engine.run()


if __name__ == "__main__":
    sys.exit(main())
