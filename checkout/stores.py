"""
进程内状态：去重账本 + 待支付订单。

两者都通过 BaseStore 接口注入给 ReconciliationCoordinator，不是模块级全局变量。
当前只有 InMemoryStore：进程重启即丢失，也不在多实例之间共享。
水平扩容时需要换成外部共享存储（实现 BaseStore 即可），这是已知限制。
"""

import threading
from abc import ABC, abstractmethod


class BaseStore(ABC):
    """get / set / has + 原子的 add（不存在才写入）。"""

    @abstractmethod
    def get(self, key, default=None):
        ...

    @abstractmethod
    def set(self, key, value) -> None:
        ...

    @abstractmethod
    def has(self, key) -> bool:
        ...

    @abstractmethod
    def add(self, key, value) -> bool:
        """key 不存在时写入并返回 True；已存在返回 False。必须是原子的。"""


class InMemoryStore(BaseStore):

    def __init__(self):
        self._data = {}
        self._lock = threading.Lock()

    def get(self, key, default=None):
        with self._lock:
            return self._data.get(key, default)

    def set(self, key, value) -> None:
        with self._lock:
            self._data[key] = value

    def has(self, key) -> bool:
        with self._lock:
            return key in self._data

    def add(self, key, value) -> bool:
        with self._lock:
            if key in self._data:
                return False
            self._data[key] = value
            return True

    def __len__(self):
        with self._lock:
            return len(self._data)


class DedupLedger:
    """
    已处理的 orderId:transactionId → 终态（completed / failed）。只增不删。

    claim() 是「检查 + 标记」的原子操作：必须在任何副作用（邮件 / CRM）之前调用，
    这样并发的重复事件会看到标记并直接返回，而不是重复发送。
    记下的终态让重复事件能如实回答「这笔付款最后是什么结果」。
    """

    def __init__(self, store=None):
        self._store = store if store is not None else InMemoryStore()

    def has_processed(self, key) -> bool:
        return self._store.has(key)

    def mark_processed(self, key, status=None) -> None:
        self._store.set(key, status)

    def claim(self, key, status=None) -> bool:
        return self._store.add(key, status)

    def recorded_status(self, key):
        """claim / mark 时记下的终态；没有记录返回 None。"""
        return self._store.get(key)


class PendingOrderStore:
    """orderId → Order。创建支付时写入，webhook 到达时读取。"""

    def __init__(self, store=None):
        self._store = store if store is not None else InMemoryStore()

    def get(self, order_id):
        if not order_id:
            return None
        return self._store.get(str(order_id))

    def save(self, order) -> None:
        self._store.set(order.order_id, order)
