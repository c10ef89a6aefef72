import logging
from pathlib import Path

logger = logging.getLogger("toolbridge")


def configure_logging(log_dir: str = "logs", level: int = logging.INFO) -> logging.Logger:
    """設定預設 logger，包含 console 與檔案輸出。

    只由進入點（CLI、``serve``）呼叫；作為函式庫匯入時不會自行安裝 handler。
    """

    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    if not logger.handlers:
        # stdio transport 佔用 stdout，console 輸出一律走 stderr
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
        logger.addHandler(console_handler)

        file_handler = logging.FileHandler(log_path / "toolbridge.log", encoding="utf-8")
        file_formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        file_handler.setFormatter(file_formatter)
        logger.addHandler(file_handler)

    logger.setLevel(level)
    return logger
