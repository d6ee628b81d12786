from lessroutes.caching.base import CacheMissingError
from lessroutes.caching.json import JSONFileCache
