import argparse
import logging


def main(argv=None) -> None:
    import tkinter as tk

    from trayclock.app import ClockApp
    from trayclock.monitor import THEME_POLL_MS
    from trayclock.platform_windows import try_set_dpi_awareness
    from trayclock.settings import PreferenceStore, default_settings_path

    parser = argparse.ArgumentParser(description="Live clock in the system tray.")
    parser.add_argument("--prefs", default=None, help="preference file (default: next to the app)")
    parser.add_argument("--poll-ms", type=int, default=THEME_POLL_MS, help="system theme poll interval")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try_set_dpi_awareness()
    root = tk.Tk()
    root.withdraw()  # 只有托盘图标，没有窗口
    app = ClockApp(root, PreferenceStore(args.prefs or default_settings_path()), poll_ms=args.poll_ms)
    app.start()
    try:
        root.mainloop()
    finally:
        app.stop()


if __name__ == "__main__":
    main()
