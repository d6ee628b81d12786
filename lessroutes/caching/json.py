import json
import typing as t

import lessroutes.caching.base as base

JSONSerializable = t.TypeVar(
    'JSONSerializable',
    bound=t.Union[t.List, t.Dict, str, int, float]
)

class JSONFileCache(base.SerializableFileCache[JSONSerializable]):

    def _serialize(self, data):
        return json.dumps(data).encode('UTF-8')

    def _deserialize(self, data):
        return json.loads(data.decode('UTF-8'))
