from linkproxy.backends.base import SourceBackend
from linkproxy.backends.alist import AListBackend
from linkproxy.backends.repo_contents import RepoContentsBackend
from linkproxy.backends.release_assets import ReleaseAssetsBackend
from linkproxy.backends.direct import DirectBackend
from linkproxy.backends.registry import BackendRegistry


__all__ = [
    'SourceBackend',
    'AListBackend',
    'RepoContentsBackend',
    'ReleaseAssetsBackend',
    'DirectBackend',
    'BackendRegistry',
]
