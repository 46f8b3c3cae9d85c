"""
명령어 처리 파이프라인 모듈

명령어 입력 → LLM 해석 → 액션 처리 순서로 실행합니다.
한 번에 하나의 명령어만 처리하며, 처리 중에 들어온 명령어는 대기열에 넣지 않고 버립니다.
"""

import asyncio
import json
import traceback

from calendar_assistant.assistant.actions import action_to_dict
from calendar_assistant.calendar.event_store import Sender

FAILURE_MESSAGE = "예상하지 못한 오류가 발생했습니다."


class CommandPipeline:
    """단일 실행 명령어 처리 파이프라인 클래스"""

    def __init__(self, store, interpreter, dispatcher):
        """
        CommandPipeline 초기화

        Args:
            store (EventStore): 일정/메시지 저장소
            interpreter: `async interpret(command, events)` 메서드를 가진 객체
            dispatcher (ActionDispatcher): 액션 처리기
        """
        self.store = store
        self.interpreter = interpreter
        self.dispatcher = dispatcher
        self.busy = False
        # 이벤트 루프는 작업을 약한 참조로만 가지므로 실행 중인 작업을 보관
        self._task = None

    def submit(self, command):
        """
        명령어 제출

        실행 중인 이벤트 루프 안에서 호출해야 합니다. 확인과 상태 변경 사이에
        await가 없으므로 두 명령어가 동시에 실행 상태로 들어갈 수 없습니다.

        Args:
            command (str): 사용자 명령어

        Returns:
            asyncio.Task: 처리 작업 (빈 명령어이거나 처리 중이면 None)
        """
        if not command or not command.strip() or self.busy:
            return None

        loop = asyncio.get_running_loop()
        self.store.add_message(command, Sender.USER)
        self.busy = True
        self._task = loop.create_task(self._run(command))
        return self._task

    async def process_command(self, command):
        """
        명령어를 제출하고 처리가 끝날 때까지 대기

        Returns:
            bool: 명령어가 처리되었는지 여부 (버려진 경우 False)
        """
        task = self.submit(command)
        if task is None:
            return False
        await task
        return True

    async def _run(self, command):
        try:
            action = await self.interpreter.interpret(command, self.store.events)
            print(
                f"해석된 액션: {json.dumps(action_to_dict(action), ensure_ascii=False)}"
            )
            self.dispatcher.dispatch(action)
        except Exception as e:
            print(f"명령어 처리 중 오류 발생: {e}")
            traceback.print_exc()
            self.store.add_message(FAILURE_MESSAGE, Sender.SYSTEM)
        finally:
            self.busy = False
            self._task = None
