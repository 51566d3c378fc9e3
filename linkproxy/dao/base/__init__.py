from linkproxy.dao.base.kv_store_base import KeyValueStore, KeyPage


__all__ = [
    'KeyValueStore',
    'KeyPage',
]
