import traceback
import sys
import logging
import typing as t
from pathlib import Path

_LOG_FORMAT = '%(asctime)s %(levelname)-3s [%(module)s] %(message)s'
_LOG_FORMAT_DATE = '%y-%m-%d %H:%M:%S'

# stdout
# ----------------------------------------------------------------------

class ColorFormatter(logging.Formatter):

    _BRIGHT_CYAN = "\x1b[37m"
    _YELLOW      = "\x1b[33m"
    _RED         = "\x1b[31m"
    _BOLD_RED    = "\x1b[31;1m"
    _RESET       = "\x1b[0m"

    _FORMATS = {
         logging.DEBUG    : _BRIGHT_CYAN + _LOG_FORMAT + _RESET,
         logging.INFO     :                _LOG_FORMAT         ,
         logging.WARNING  : _YELLOW      + _LOG_FORMAT + _RESET,
         logging.ERROR    : _RED         + _LOG_FORMAT + _RESET,
         logging.CRITICAL : _BOLD_RED    + _LOG_FORMAT + _RESET,
    }

    def __init__(self, color: bool = True) -> None:
        super().__init__(_LOG_FORMAT, _LOG_FORMAT_DATE)
        self.__color = color

    def format(self, record):
        if not self.__color: return super().format(record)
        log_fmt = self._FORMATS.get(record.levelno, _LOG_FORMAT)
        formatter = logging.Formatter(log_fmt, _LOG_FORMAT_DATE)
        return formatter.format(record)

# general
# ----------------------------------------------------------------------

logging.addLevelName(logging.INFO     , 'INF')
logging.addLevelName(logging.DEBUG    , 'DBG')
logging.addLevelName(logging.WARNING  , 'WRN')
logging.addLevelName(logging.ERROR    , 'ERR')
logging.addLevelName(logging.CRITICAL , 'CRT')

_CONFIGURED = False

def logging_setup(
        level: int = logging.INFO,
        log_file: t.Optional[Path] = None,
) -> None:
    """Configure the root logger once, later calls only adjust the level."""
    global _CONFIGURED
    if _CONFIGURED:
        logging.getLogger().setLevel(level)
        return
    _CONFIGURED = True

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(ColorFormatter(color=sys.stderr.isatty()))
    handlers: t.List[logging.Handler] = [ stream_handler ]

    if log_file is not None:
        log_file.parent.mkdir(exist_ok=True, parents=True)
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setFormatter(
            logging.Formatter(_LOG_FORMAT, _LOG_FORMAT_DATE)
        )
        handlers.append(file_handler)

    logging.basicConfig(level=level, datefmt=_LOG_FORMAT_DATE, handlers=handlers)
    sys.excepthook = log_fatal

# logging exceptions on exit
# ----------------------------------------------------------------------

def log_fatal(_type, _value, _traceback):
    logging.getLogger(__name__).critical(
        ''.join(traceback.format_exception(_type, _value, _traceback))
    )
