from datetime import datetime, timedelta
import json
from pathlib import Path
import typing as t
from abc import ABCMeta, abstractmethod
import logging

_T = t.TypeVar('_T')
_LOG = logging.getLogger('caching')


class CacheMissingError(RuntimeError):
    pass


class Cacheable(t.Generic[_T], metaclass=ABCMeta):

    def __init__(self, name: str) -> None:
        self.name = name

    # user definition
    # ----------------------------------------------------------------------

    @abstractmethod
    def _on_miss(self) -> None: raise NotImplementedError()

    @abstractmethod
    def _retrieve(self) -> _T: raise NotImplementedError()

    @abstractmethod
    def check(self) -> bool: raise NotImplementedError()

    @abstractmethod
    def invalidate(self) -> None: raise NotImplementedError()

    # behaviour
    # ----------------------------------------------------------------------

    def ensure(self):
        if not self.check():
            _LOG.info(f'Cache Miss: {self.name}')
            self._on_miss()
        else:
            _LOG.info(f'Cache Hit: {self.name}')


    def get(self) -> _T:
        self.ensure()
        return self._retrieve()


class Cache(Cacheable[_T]):
    """A cache whose state is tracked in a json meta file.

    The cache is considered fresh while the meta file says it is valid and,
    if `max_age` is given, it was last updated less than `max_age` ago.
    """

    def __init__(
            self,
            name: str,
            meta_path: Path,
            max_age: t.Optional[timedelta] = None,
    ) -> None:
        super().__init__(name)
        self._meta_path = meta_path
        self.max_age = max_age

    @abstractmethod
    def _retrieve(self) -> _T: raise NotImplementedError()

    # behaviour
    # ----------------------------------------------------------------------

    class _Meta(t.TypedDict):
        last_updated: datetime
        valid: bool

    def _get_meta(self) -> t.Optional[_Meta]:
        if not self._meta_path.exists(): return None
        with open(self._meta_path, 'r', encoding='UTF-8') as f:
            meta = json.loads(f.read())
        return {
            'valid'        : meta['valid'],
            'last_updated' : datetime.fromisoformat(meta['last_updated']),
        }

    def _set_meta(self, valid: bool, last_updated: t.Optional[datetime] = None):
        meta = self._get_meta()
        if last_updated is None:
            last_updated = meta['last_updated'] if meta is not None \
                else datetime.now()
        self._meta_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self._meta_path, 'w', encoding='UTF-8') as f:
            f.write(json.dumps({
                'valid'        : valid,
                'last_updated' : last_updated.isoformat(),
            }, indent=2))

    def check(self) -> bool:
        meta = self._get_meta()
        if meta is None or not meta['valid']: return False
        if self.max_age is None: return True
        # a last_updated in the future counts as fresh
        age = datetime.now() - meta['last_updated']
        if age > self.max_age:
            _LOG.info(f'Cache Stale: {self.name} (age {age})')
            return False
        return True

    def invalidate(self) -> None:
        _LOG.info(f'Cache Invalidate: {self.name}')
        self._set_meta(valid=False)



class SerializableFileCache(Cache[_T]):
    """Caches the return value of `getter` in the file at `path`.

    The meta file lives next to it as `<path>.meta.json`.
    """

    def __init__(
            self,
            path: t.Union[Path, str],
            getter: t.Callable[[], _T],
            max_age: t.Optional[timedelta] = None,
    ) -> None:
        self._cache_path = Path(path)
        super().__init__(
            name=self._cache_path.name,
            meta_path=self._cache_path.with_name(
                self._cache_path.name + '.meta.json'
            ),
            max_age=max_age,
        )
        self.__getter = getter

    @abstractmethod
    def _serialize(self, data: _T) -> bytes: raise NotImplementedError()

    @abstractmethod
    def _deserialize(self, data: bytes) -> _T: raise NotImplementedError()

    @property
    def exists(self) -> bool:
        return self._cache_path.exists()

    def check(self) -> bool:
        return self.exists and super().check()

    def _on_miss(self) -> None:
        data = self.__getter()
        serdata = self._serialize(data)
        self._cache_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self._cache_path, 'wb') as f: f.write(serdata)
        self._set_meta(valid=True, last_updated=datetime.now())

    def _retrieve(self) -> _T:
        with open(self._cache_path, 'rb') as f:
            return self._deserialize(f.read())

    def load(self) -> _T:
        """Read whatever is cached, no matter how old. Never fetches."""
        if not self.exists:
            raise CacheMissingError(f'Cache file {self._cache_path} is missing')
        _LOG.info(f'Cache Load: {self.name}')
        return self._retrieve()
