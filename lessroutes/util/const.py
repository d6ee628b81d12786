import os.path
from pathlib import Path
import configparser

HERE = Path(os.path.dirname(__file__)) / '..'

# optional defaults, same format as the file given with --config
ENV = configparser.ConfigParser()
ENV.optionxform = str # type: ignore
ENV.read(HERE / 'env.ini')
