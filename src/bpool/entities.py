from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

SUCCESS = 'success'
FAILURE = 'failure'


@dataclass
class Response:
    """Uniform envelope returned by every pool operation"""
    result: str
    data: Any = None
    error: Optional[str] = None

    @classmethod
    def success(cls, data: Any = None) -> Response:
        return cls(SUCCESS, data=data)

    @classmethod
    def failure(cls, error: Any, data: Any = None) -> Response:
        return cls(FAILURE, data=data, error=str(error))

    @property
    def ok(self) -> bool:
        return self.result == SUCCESS

    def to_dict(self) -> dict[str, Any]:
        return {
            key: value
            for key, value in (('result', self.result), ('data', self.data), ('error', self.error))
            if value is not None
        }


@dataclass
class CallLog:
    caller: str
    raw_sig: str
    raw_data: str
    decoded_sig: Optional[str]
    decoded_values: list = field(default_factory=list)
    block_number: Optional[int] = None
    log_index: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            'caller': self.caller,
            'raw_sig': self.raw_sig,
            'raw_data': self.raw_data,
            'decoded_sig': self.decoded_sig,
            'decoded_values': self.decoded_values,
        }
