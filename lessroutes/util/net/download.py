import time
import logging
import urllib.error
import urllib.request

from lessroutes.util.retry import retry

_LOG = logging.getLogger(__name__)

_CHUNK_SIZE = 2 ** 16
_TIMEOUT_S = 60


@retry(exceptions=(urllib.error.URLError, TimeoutError, ConnectionError))
def download_text(url: str, encoding: str = 'utf-8') -> str:
    """Download `url` into memory, honoring the usual *_proxy env vars."""
    last_report_print = time.time()
    chunks = []
    downloaded = 0

    _LOG.info(f'Downloading {url}')
    with urllib.request.urlopen(url, timeout=_TIMEOUT_S) as resp:
        total_size = int(resp.headers.get('Content-Length') or 0)
        while True:
            chunk = resp.read(_CHUNK_SIZE)
            if not chunk: break
            chunks.append(chunk)
            downloaded += len(chunk)

            now = time.time()
            if now - last_report_print > 1:
                _LOG.info(
                    f'{url.split("/")[-1]}: {round(downloaded / 2**20, 2)}MB /' +
                    f' {round(total_size / 2 ** 20, 2)}MB'
                )
                last_report_print = now

    _LOG.info(f'Downloaded {url} ({round(downloaded / 2**20, 2)}MB)')
    return b''.join(chunks).decode(encoding)
