from linkproxy.dao.link_record_dao import LinkRecordDAO


__all__ = [
    'LinkRecordDAO',
]
