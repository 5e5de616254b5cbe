"""Client logging, kept free of the server package and its loguru setup"""
import sys
from datetime import datetime


class ClientLogger:
    """Prints timestamped lines; warnings go to stderr"""

    def __init__(self, name: str = "UsherClient"):
        self.name = name

    def _emit(self, level: str, message: str, stream):
        stamp = datetime.now().strftime("%H:%M:%S")
        print(f"{stamp} {level:<7} {self.name}: {message}", file=stream)

    def info(self, message: str):
        self._emit("INFO", message, sys.stdout)

    def warning(self, message: str):
        self._emit("WARNING", message, sys.stderr)


def get_logger(name: str = "UsherClient") -> ClientLogger:
    return ClientLogger(name)


__all__ = ["get_logger", "ClientLogger"]
