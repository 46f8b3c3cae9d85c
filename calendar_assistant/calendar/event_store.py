"""
일정/대화 저장소 모듈

이 모듈은 세션 동안 유지되는 일정 목록과 대화 메시지 로그를 관리합니다.
상태 변경은 ActionDispatcher와 CommandPipeline을 통해서만 이루어집니다.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class Sender(str, Enum):
    """메시지 발신자 역할"""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


@dataclass(frozen=True)
class Event:
    """캘린더 일정 (생성 후 변경 불가)"""

    id: str
    title: str
    date: str  # YYYY-MM-DD
    time: str  # HH:MM
    description: Optional[str] = None


@dataclass(frozen=True)
class Message:
    """대화 로그 메시지"""

    id: str
    sender: Sender
    text: str
    timestamp: str  # ISO 8601


def new_id():
    return uuid.uuid4().hex


class EventStore:
    """일정 목록과 메시지 로그를 소유하는 저장소 클래스"""

    def __init__(self, events=None, messages=None, now=datetime.now):
        """
        EventStore 초기화

        Args:
            events (list): 초기 일정 목록
            messages (list): 초기 메시지 목록
            now (callable): 현재 시각을 반환하는 함수
        """
        self._events = list(events or [])
        self._messages = list(messages or [])
        self._now = now
        self._listeners = []

    @property
    def events(self):
        return tuple(self._events)

    @property
    def messages(self):
        return tuple(self._messages)

    def subscribe(self, listener):
        """
        메시지 추가 알림 등록

        Args:
            listener (callable): 새 Message를 인자로 받는 함수
        """
        self._listeners.append(listener)

    def add_event(self, title, date, time, description=None):
        """
        일정 추가

        Args:
            title (str): 일정 제목
            date (str): 날짜 (YYYY-MM-DD 형식)
            time (str): 시간 (HH:MM 형식)
            description (str): 설명 (선택)

        Returns:
            Event: 추가된 일정
        """
        event = Event(
            id=new_id(), title=title, date=date, time=time, description=description
        )
        self._events.append(event)
        return event

    def add_message(self, text, sender):
        """
        메시지 추가

        Args:
            text (str): 메시지 내용
            sender (Sender): 발신자 역할

        Returns:
            Message: 추가된 메시지
        """
        message = Message(
            id=new_id(),
            sender=Sender(sender),
            text=text,
            timestamp=self._now().isoformat(),
        )
        self._messages.append(message)
        for listener in self._listeners:
            listener(message)
        return message

    def events_on(self, date):
        """날짜 문자열이 정확히 일치하는 일정 목록"""
        return [event for event in self._events if event.date == date]
