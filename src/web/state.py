import threading
import time


class SharedState:
    """
    Singleton class to share monitor status between the observation loop
    and the web server.
    """
    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super(SharedState, cls).__new__(cls)
                    cls._instance.monitor = None
                    cls._instance.monitor_lock = threading.Lock()
                    cls._instance.system_stats = {
                        "start_time": time.time(),
                        "last_update_ts": None,
                    }
        return cls._instance

    def update_monitor(self, snapshot):
        """Replace the published monitor snapshot."""
        with self.monitor_lock:
            self.monitor = dict(snapshot)
            self.system_stats["last_update_ts"] = time.time()

    def get_monitor_copy(self):
        with self.monitor_lock:
            if self.monitor is None:
                return None
            return dict(self.monitor)

    def get_system_stats_copy(self):
        """Return a shallow copy of current system stats."""
        return dict(self.system_stats)

# Global instance
state = SharedState()
