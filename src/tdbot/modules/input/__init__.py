from .actuator import InputActuator, NullActuator, GuardedActuator
from .heartbeat import HeartbeatThread
from .keys import key_code, key_name

__all__ = [
    "InputActuator",
    "NullActuator",
    "GuardedActuator",
    "HeartbeatThread",
    "key_code",
    "key_name",
]
