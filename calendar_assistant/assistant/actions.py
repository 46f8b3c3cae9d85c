"""
어시스턴트 액션 모듈

이 모듈은 LLM이 명령어를 해석해 만들어내는 구조화된 액션의 종류를 정의합니다.
액션은 다음 중 하나이며, 새로운 종류를 추가하면 ActionDispatcher도 함께 수정해야 합니다.

    CREATE_EVENT, READ_EVENTS, SUMMARIZE_EVENTS,
    OPEN_PROGRAM, GENERAL_RESPONSE, ERROR
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class InvalidActionError(ValueError):
    """LLM 응답을 액션으로 변환할 수 없을 때 발생하는 예외"""


class ActionType(str, Enum):
    CREATE_EVENT = "CREATE_EVENT"
    READ_EVENTS = "READ_EVENTS"
    SUMMARIZE_EVENTS = "SUMMARIZE_EVENTS"
    OPEN_PROGRAM = "OPEN_PROGRAM"
    GENERAL_RESPONSE = "GENERAL_RESPONSE"
    ERROR = "ERROR"


class Period(str, Enum):
    TODAY = "today"
    TOMORROW = "tomorrow"
    THIS_WEEK = "this_week"


@dataclass(frozen=True)
class CreateEventAction:
    title: str
    date: str
    time: str
    description: Optional[str] = None
    type = ActionType.CREATE_EVENT

    def payload(self):
        payload = {"title": self.title, "date": self.date, "time": self.time}
        if self.description is not None:
            payload["description"] = self.description
        return payload


@dataclass(frozen=True)
class ReadEventsAction:
    date: str
    type = ActionType.READ_EVENTS

    def payload(self):
        return {"date": self.date}


@dataclass(frozen=True)
class SummarizeEventsAction:
    period: Period
    type = ActionType.SUMMARIZE_EVENTS

    def payload(self):
        return {"period": self.period.value}


@dataclass(frozen=True)
class OpenProgramAction:
    program_name: str
    type = ActionType.OPEN_PROGRAM

    def payload(self):
        return {"programName": self.program_name}


@dataclass(frozen=True)
class GeneralResponseAction:
    text: str
    type = ActionType.GENERAL_RESPONSE

    def payload(self):
        return {"text": self.text}


@dataclass(frozen=True)
class ErrorAction:
    message: str
    type = ActionType.ERROR

    def payload(self):
        return {"message": self.message}


def action_to_dict(action):
    """액션을 LLM 응답과 같은 형태의 딕셔너리로 변환"""
    return {"type": action.type.value, "payload": action.payload()}


def _require(payload, key):
    value = payload.get(key)
    if not isinstance(value, str) or not value.strip():
        raise InvalidActionError(f"필수 항목 누락: {key}")
    return value.strip()


def _require_date(payload):
    date = _require(payload, "date")
    if not _DATE_RE.match(date):
        raise InvalidActionError(f"잘못된 날짜 형식: {date}")
    return date


def _require_time(payload):
    time = _require(payload, "time")
    if not _TIME_RE.match(time):
        raise InvalidActionError(f"잘못된 시간 형식: {time}")
    return time


def action_from_dict(data):
    """
    LLM 응답 딕셔너리를 액션으로 변환

    Args:
        data (dict): {"type": "...", "payload": {...}} 형식의 딕셔너리

    Returns:
        액션 객체

    Raises:
        InvalidActionError: 알 수 없는 타입이거나 필수 항목이 잘못된 경우
    """
    if not isinstance(data, dict):
        raise InvalidActionError("액션은 JSON 객체여야 합니다.")

    try:
        action_type = ActionType(data.get("type"))
    except ValueError:
        raise InvalidActionError(f"알 수 없는 액션 타입: {data.get('type')}")

    payload = data.get("payload") or {}
    if not isinstance(payload, dict):
        raise InvalidActionError("payload는 JSON 객체여야 합니다.")

    if action_type is ActionType.CREATE_EVENT:
        description = payload.get("description")
        if description is not None and not isinstance(description, str):
            raise InvalidActionError("description은 문자열이어야 합니다.")
        return CreateEventAction(
            title=_require(payload, "title"),
            date=_require_date(payload),
            time=_require_time(payload),
            description=description or None,
        )

    if action_type is ActionType.READ_EVENTS:
        return ReadEventsAction(date=_require_date(payload))

    if action_type is ActionType.SUMMARIZE_EVENTS:
        try:
            period = Period(payload.get("period"))
        except ValueError:
            raise InvalidActionError(f"알 수 없는 기간: {payload.get('period')}")
        return SummarizeEventsAction(period=period)

    if action_type is ActionType.OPEN_PROGRAM:
        return OpenProgramAction(program_name=_require(payload, "programName"))

    if action_type is ActionType.GENERAL_RESPONSE:
        _require(payload, "text")
        return GeneralResponseAction(text=payload["text"])

    return ErrorAction(message=_require(payload, "message"))
