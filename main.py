"""Entry point: start the service log desktop client."""
from core.common.app_context import AppContext
from framework.gui.main_window import MainWindow


def main() -> None:
    config = AppContext.config()
    AppContext.logger().log(
        "framework",
        "app_started",
        message=f"{config.general.app_name} {config.general.version} -> {config.api.base_url}",
    )
    app = MainWindow(AppContext)
    app.mainloop()


if __name__ == "__main__":
    main()
