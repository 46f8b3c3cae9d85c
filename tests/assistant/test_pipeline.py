"""
명령어 처리 파이프라인 테스트 모듈
"""

import asyncio
import unittest
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock, patch

from calendar_assistant.assistant.actions import (
    CreateEventAction,
    ErrorAction,
    GeneralResponseAction,
    OpenProgramAction,
)
from calendar_assistant.assistant.dispatcher import ActionDispatcher
from calendar_assistant.assistant.pipeline import FAILURE_MESSAGE, CommandPipeline
from calendar_assistant.calendar.event_store import EventStore, Sender


class TestCommandPipeline(unittest.IsolatedAsyncioTestCase):
    """명령어 처리 파이프라인 테스트 클래스"""

    def setUp(self):
        """테스트 설정"""
        self.store = EventStore()
        self.interpreter = MagicMock()
        self.interpreter.interpret = AsyncMock(
            return_value=GeneralResponseAction("네, 알겠습니다.")
        )
        self.launcher = MagicMock()
        self.dispatcher = ActionDispatcher(
            self.store,
            launcher=self.launcher,
            now=lambda: datetime(2024, 3, 15, 12, 0),
        )
        self.pipeline = CommandPipeline(self.store, self.interpreter, self.dispatcher)

    async def test_create_event_scenario(self):
        """일정 생성 시나리오 테스트"""
        command = "create an event called Standup tomorrow at 09:00"
        self.interpreter.interpret.return_value = CreateEventAction(
            title="Standup", date="2024-03-16", time="09:00"
        )

        processed = await self.pipeline.process_command(command)

        self.assertTrue(processed)
        self.interpreter.interpret.assert_awaited_once_with(command, ())
        self.assertEqual(len(self.store.events), 1)
        self.assertEqual(self.store.events[0].title, "Standup")

        user_message, reply = self.store.messages
        self.assertIs(user_message.sender, Sender.USER)
        self.assertEqual(user_message.text, command)
        self.assertIs(reply.sender, Sender.ASSISTANT)
        self.assertIn("Standup", reply.text)
        self.assertIn("2024년 3월 16일", reply.text)
        self.assertIn("09:00", reply.text)
        self.assertFalse(self.pipeline.busy)

    async def test_user_message_is_appended_on_submit(self):
        """제출 즉시 사용자 메시지가 추가되고 실행 상태가 됨"""
        task = self.pipeline.submit("안녕")

        self.assertIsNotNone(task)
        self.assertTrue(self.pipeline.busy)
        self.assertEqual(len(self.store.messages), 1)
        self.assertIs(self.store.messages[0].sender, Sender.USER)

        await task
        self.assertFalse(self.pipeline.busy)
        self.assertEqual(
            [m.sender for m in self.store.messages], [Sender.USER, Sender.ASSISTANT]
        )

    async def test_user_message_visible_before_interpreter_call(self):
        """LLM 호출 시점에 사용자 메시지가 이미 로그에 있음"""
        seen = []

        async def interpret(command, events):
            seen.append(self.store.messages[-1])
            return GeneralResponseAction("확인")

        self.interpreter.interpret = interpret

        await self.pipeline.process_command("확인해 줘")

        self.assertEqual(seen[0].text, "확인해 줘")
        self.assertIs(seen[0].sender, Sender.USER)

    async def test_interpreter_receives_current_events(self):
        """현재 일정 목록이 문맥으로 전달됨"""
        event = self.store.add_event("A", "2024-03-15", "10:00")

        await self.pipeline.process_command("오늘 일정 알려줘")

        self.interpreter.interpret.assert_awaited_once_with("오늘 일정 알려줘", (event,))

    async def test_empty_command_is_dropped(self):
        """빈 명령어는 무시"""
        for command in ["", "   ", "\n\t", None]:
            with self.subTest(command=command):
                self.assertIsNone(self.pipeline.submit(command))
                self.assertFalse(await self.pipeline.process_command(command))

        self.assertEqual(self.store.messages, ())
        self.assertFalse(self.pipeline.busy)
        self.interpreter.interpret.assert_not_called()

    async def test_submission_while_busy_is_dropped(self):
        """처리 중 제출된 명령어는 대기열 없이 버려짐"""
        release = asyncio.Event()

        async def interpret(command, events):
            await release.wait()
            return GeneralResponseAction(f"처리됨: {command}")

        self.interpreter.interpret = AsyncMock(side_effect=interpret)

        first = self.pipeline.submit("첫 번째")
        await asyncio.sleep(0)

        self.assertIsNone(self.pipeline.submit("두 번째"))
        self.assertFalse(await self.pipeline.process_command("세 번째"))
        self.assertTrue(self.pipeline.busy)
        self.assertEqual(len(self.store.messages), 1)

        release.set()
        await first

        self.assertFalse(self.pipeline.busy)
        self.interpreter.interpret.assert_awaited_once()
        self.assertEqual(
            [m.text for m in self.store.messages], ["첫 번째", "처리됨: 첫 번째"]
        )

        # 처리가 끝나면 다시 제출 가능
        self.assertTrue(await self.pipeline.process_command("네 번째"))

    async def test_interpreter_failure(self):
        """LLM 호출 실패 시 시스템 메시지 추가 후 대기 상태로 복귀"""
        self.interpreter.interpret.side_effect = RuntimeError("연결 오류")

        processed = await self.pipeline.process_command("오늘 일정 알려줘")

        self.assertTrue(processed)
        self.assertFalse(self.pipeline.busy)
        last = self.store.messages[-1]
        self.assertIs(last.sender, Sender.SYSTEM)
        self.assertEqual(last.text, FAILURE_MESSAGE)
        self.assertEqual(len(self.store.messages), 2)

    async def test_error_action_is_not_a_failure(self):
        """LLM이 보낸 ERROR는 일반 실패 메시지와 구분됨"""
        self.interpreter.interpret.return_value = ErrorAction("시간을 알 수 없습니다.")

        await self.pipeline.process_command("일정 만들어 줘")

        last = self.store.messages[-1]
        self.assertIs(last.sender, Sender.SYSTEM)
        self.assertIn("시간을 알 수 없습니다.", last.text)
        self.assertNotEqual(last.text, FAILURE_MESSAGE)

    async def test_dispatch_failure_returns_to_idle(self):
        """액션 처리 중 오류도 대기 상태로 복귀"""
        self.interpreter.interpret.return_value = object()

        await self.pipeline.process_command("이상한 명령")

        self.assertFalse(self.pipeline.busy)
        self.assertEqual(self.store.messages[-1].text, FAILURE_MESSAGE)

    async def test_running_task_is_kept(self):
        """실행 중인 작업을 파이프라인이 보관하고 끝나면 해제"""
        release = asyncio.Event()

        async def interpret(command, events):
            await release.wait()
            return GeneralResponseAction("완료")

        self.interpreter.interpret = interpret

        task = self.pipeline.submit("기다려 줘")

        self.assertIs(self.pipeline._task, task)

        release.set()
        await task

        self.assertIsNone(self.pipeline._task)
        self.assertEqual(self.store.messages[-1].text, "완료")

    async def test_interpreted_action_is_logged(self):
        """해석된 액션을 JSON 형태로 콘솔에 기록"""
        self.interpreter.interpret.return_value = OpenProgramAction("spotify")

        with patch("builtins.print") as mock_print:
            await self.pipeline.process_command("스포티파이 열어 줘")

        logged = [call.args[0] for call in mock_print.call_args_list]
        self.assertIn(
            '해석된 액션: {"type": "OPEN_PROGRAM", "payload": {"programName": "spotify"}}',
            logged,
        )
        self.launcher.assert_called_once_with("spotify")


class TestCommandPipelineWithoutLoop(unittest.TestCase):
    """이벤트 루프 밖에서의 제출 테스트 클래스"""

    def test_submit_requires_running_loop(self):
        """이벤트 루프 밖에서는 상태를 바꾸지 않고 예외 발생"""
        store = EventStore()
        pipeline = CommandPipeline(store, MagicMock(), MagicMock())

        with self.assertRaises(RuntimeError):
            pipeline.submit("안녕")

        self.assertFalse(pipeline.busy)
        self.assertEqual(store.messages, ())


if __name__ == "__main__":
    unittest.main()
