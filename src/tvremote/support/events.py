from queue import Queue, Empty
import threading


class EventSource(object):

    def __init__(self):
        self._handlers = []
        self._lock = threading.Lock()

    def __iadd__(self, handler):
        return self.add(handler)

    def __isub__(self, handler):
        return self.remove(handler)

    def add(self, handler):
        with self._lock:
            self._handlers.append(handler)
        return self

    def remove(self, handler):
        with self._lock:
            if handler in self._handlers:
                self._handlers.remove(handler)
        return self

    def handlers(self):
        with self._lock:
            return tuple(self._handlers)

    def fire(self, *args, **kwargs):
        self._fire(*args, **kwargs)

    def fire_all(self, events):
        for e in events:
            self._fire(e)

    def _fire(self, *args, **kwargs):
        for handler in self.handlers():
            handler(*args, **kwargs)


class QueuedListener:
    """
    An event handler that buffers every event it receives in a queue.
    The firing thread never waits on the reader: events are put on an unbounded queue and
    retrieved later with get() or drain().
    """

    def __init__(self, source: EventSource, initial=None):
        """
        :param source: the event source to listen to. The listener registers itself on construction.
        :param initial: an optional event placed in the queue before any fired event.
        """
        self.source = source
        self.event_queue = Queue()
        if initial is not None:
            self.event_queue.put(initial)
        self._closed = False
        source.add(self)

    def __call__(self, event):
        self.event_queue.put(event)

    def get(self, timeout=None):
        """ retrieves the next event, waiting up to timeout seconds.
            Returns None if no event arrives in time. """
        try:
            return self.event_queue.get(timeout=timeout)
        except Empty:
            return None

    def drain(self):
        """ retrieves all the events currently queued, in the order they were fired. """
        events = []
        queue = self.event_queue
        while not queue.empty():
            events.append(queue.get())
        return events

    @property
    def closed(self):
        return self._closed

    def close(self):
        """ stops listening. Events already queued can still be drained. """
        if not self._closed:
            self._closed = True
            self.source.remove(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
