from devcap.core.application import run as cli_run
from devcap.gui.main import main as gui_main
import sys

__all__ = ["run"]

def run():
    """
    Entry point for both surfaces.
    - With arguments, runs the CLI (scan, watch, config, gui)
    - Without arguments (e.g. launched from a desktop entry), starts the tray app
    """
    if len(sys.argv) == 1:
        gui_main()
    else:
        cli_run()

if __name__ == "__main__":
    run()
