"""
액션 처리 모듈

이 모듈은 LLM이 만든 액션을 받아 저장소를 변경하고 응답 메시지를 추가합니다.
외부 프로그램 실행 같은 부수 효과는 모든 상태 변경이 끝난 뒤에 실행됩니다.
"""

from datetime import datetime, timedelta

from calendar_assistant.assistant.actions import (
    CreateEventAction,
    ErrorAction,
    GeneralResponseAction,
    OpenProgramAction,
    Period,
    ReadEventsAction,
    SummarizeEventsAction,
)
from calendar_assistant.assistant.launcher import launch_program
from calendar_assistant.calendar.event_store import Sender
from calendar_assistant.calendar.formatter import format_date, generate_summary_text


class ActionDispatcher:
    """액션을 상태 변경과 응답 메시지로 변환하는 클래스"""

    def __init__(self, store, launcher=launch_program, now=datetime.now):
        """
        ActionDispatcher 초기화

        Args:
            store (EventStore): 일정/메시지 저장소
            launcher (callable): 프로그램 이름을 받아 실행을 요청하는 함수
            now (callable): 현재 시각을 반환하는 함수
        """
        self.store = store
        self.launcher = launcher
        self.now = now

    def dispatch(self, action):
        """
        액션 처리

        Args:
            action: actions 모듈의 액션 객체
        """
        side_effect = None

        if isinstance(action, CreateEventAction):
            self._create_event(action)
        elif isinstance(action, ReadEventsAction):
            events = self.store.events_on(action.date)
            self._reply(generate_summary_text(events, action.date))
        elif isinstance(action, SummarizeEventsAction):
            events = self.relevant_events(action.period)
            self._reply(generate_summary_text(events, action.period.value))
        elif isinstance(action, OpenProgramAction):
            self._reply(f"{action.program_name}을(를) 열어 보겠습니다...")
            side_effect = action.program_name
        elif isinstance(action, GeneralResponseAction):
            self._reply(action.text)
        elif isinstance(action, ErrorAction):
            self.store.add_message(f"오류: {action.message}", Sender.SYSTEM)
        else:
            raise TypeError(f"지원하지 않는 액션: {action!r}")

        if side_effect is not None:
            self.launcher(side_effect)

    def relevant_events(self, period):
        """
        기간에 해당하는 일정 목록

        'this_week'는 아직 기간 계산이 없어 항상 빈 목록을 반환합니다.
        """
        today = self.now().date()

        if period is Period.TODAY:
            return self.store.events_on(today.isoformat())
        if period is Period.TOMORROW:
            return self.store.events_on((today + timedelta(days=1)).isoformat())
        return []

    def _create_event(self, action):
        event = self.store.add_event(
            title=action.title,
            date=action.date,
            time=action.time,
            description=action.description,
        )
        self._reply(
            f'일정을 만들었습니다: "{event.title}" '
            f"{format_date(event.date)} {event.time}"
        )

    def _reply(self, text):
        self.store.add_message(text, Sender.ASSISTANT)
