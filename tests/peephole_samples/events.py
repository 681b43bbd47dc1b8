"""Classes raising events through peephole.events.Event."""

from peephole.events import Event


class Downloader:
    progress = Event(int)
    __finished = Event(str)
    _failed = Event(str, Exception)

    def __init__(self, url: str):
        self._url = url

    def _advance(self, percent: int) -> None:
        self.progress.fire(percent)

    def _finish(self, path: str) -> None:
        self.__finished.fire(path)

    def _fail(self, error: Exception) -> None:
        self._failed.fire(self._url, error)


class Silent:
    def __init__(self):
        self.progress = None
