"""
Multi-bot process manager.

Reads bot configs from bots/*.json and spawns main.py for each.
A bot that exits with a non-zero status lost its session and is
restarted; a bot that exits cleanly is left stopped.
"""

import sys
import json
import time
import signal
import logging
import subprocess
from pathlib import Path

BOT_DIR = Path(__file__).parent
BOTS_DIR = BOT_DIR / "bots"
RESTART_DELAY = 5

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - run_all - %(levelname)s - %(message)s'
)
logger = logging.getLogger("run_all")

processes: dict[str, subprocess.Popen] = {}
config_paths: dict[str, Path] = {}
shutting_down = False


def start_bot(config_path: Path) -> subprocess.Popen:
    """Start a bot subprocess."""
    config = json.loads(config_path.read_text())
    name = config["name"]

    proc = subprocess.Popen(
        [sys.executable, str(BOT_DIR / "main.py"), "--config", str(config_path)],
        cwd=str(BOT_DIR),
    )
    logger.info(f"Started bot '{name}' (PID {proc.pid})")
    return proc


def check_bots() -> None:
    """Restart bots that exited with an error and forget the ones that exited cleanly."""
    for name, proc in list(processes.items()):
        retcode = proc.poll()
        if retcode is None:
            continue

        if retcode == 0:
            logger.info(f"Bot '{name}' exited cleanly, not restarting")
            del processes[name]
            continue

        logger.warning(f"Bot '{name}' exited with code {retcode}. Restarting in {RESTART_DELAY}s...")
        time.sleep(RESTART_DELAY)
        if not shutting_down:
            processes[name] = start_bot(config_paths[name])


def shutdown(signum, frame):
    """Gracefully stop all bots."""
    global shutting_down
    shutting_down = True
    logger.info("Shutting down all bots...")
    for name, proc in processes.items():
        logger.info(f"Stopping bot '{name}' (PID {proc.pid})")
        proc.terminate()
    for name, proc in processes.items():
        try:
            proc.wait(timeout=15)
        except subprocess.TimeoutExpired:
            logger.warning(f"Bot '{name}' did not stop gracefully, killing")
            proc.kill()
    sys.exit(0)


def main():
    signal.signal(signal.SIGTERM, shutdown)
    signal.signal(signal.SIGINT, shutdown)

    config_files = sorted(BOTS_DIR.glob("*.json"))
    if not config_files:
        logger.error(f"No bot configs found in {BOTS_DIR}")
        sys.exit(1)

    logger.info(f"Found {len(config_files)} bot config(s)")

    for config_path in config_files:
        config = json.loads(config_path.read_text())
        name = config["name"]
        config_paths[name] = config_path
        processes[name] = start_bot(config_path)

    logger.info("All bots started. Monitoring processes...")

    while not shutting_down and processes:
        check_bots()
        time.sleep(3)

    logger.info("No bots left running")


if __name__ == "__main__":
    main()
