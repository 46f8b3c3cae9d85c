"""
어시스턴트 액션 테스트 모듈
"""

import unittest

from calendar_assistant.assistant.actions import (
    ActionType,
    CreateEventAction,
    ErrorAction,
    GeneralResponseAction,
    InvalidActionError,
    OpenProgramAction,
    Period,
    ReadEventsAction,
    SummarizeEventsAction,
    action_from_dict,
    action_to_dict,
)


class TestActionFromDict(unittest.TestCase):
    """LLM 응답 → 액션 변환 테스트 클래스"""

    def test_create_event(self):
        """CREATE_EVENT 변환 테스트"""
        action = action_from_dict(
            {
                "type": "CREATE_EVENT",
                "payload": {
                    "title": "Standup",
                    "date": "2024-03-16",
                    "time": "09:00",
                },
            }
        )
        self.assertEqual(action, CreateEventAction("Standup", "2024-03-16", "09:00"))
        self.assertIs(action.type, ActionType.CREATE_EVENT)
        self.assertIsNone(action.description)

    def test_create_event_with_description(self):
        """CREATE_EVENT 설명 포함 테스트"""
        action = action_from_dict(
            {
                "type": "CREATE_EVENT",
                "payload": {
                    "title": "치과",
                    "date": "2024-03-16",
                    "time": "15:30",
                    "description": "정기 검진",
                },
            }
        )
        self.assertEqual(action.description, "정기 검진")

    def test_create_event_invalid(self):
        """CREATE_EVENT 잘못된 값 테스트"""
        base = {"title": "회의", "date": "2024-03-16", "time": "09:00"}
        invalid_payloads = [
            {**base, "title": ""},
            {k: v for k, v in base.items() if k != "date"},
            {**base, "date": "16/03/2024"},
            {**base, "time": "9시"},
            {**base, "time": "24:00"},
            {**base, "description": 3},
        ]
        for payload in invalid_payloads:
            with self.subTest(payload=payload):
                with self.assertRaises(InvalidActionError):
                    action_from_dict({"type": "CREATE_EVENT", "payload": payload})

    def test_other_actions(self):
        """나머지 액션 변환 테스트"""
        cases = [
            (
                {"type": "READ_EVENTS", "payload": {"date": "2024-03-15"}},
                ReadEventsAction("2024-03-15"),
            ),
            (
                {"type": "SUMMARIZE_EVENTS", "payload": {"period": "this_week"}},
                SummarizeEventsAction(Period.THIS_WEEK),
            ),
            (
                {"type": "OPEN_PROGRAM", "payload": {"programName": "spotify"}},
                OpenProgramAction("spotify"),
            ),
            (
                {"type": "GENERAL_RESPONSE", "payload": {"text": " 안녕하세요! "}},
                GeneralResponseAction(" 안녕하세요! "),
            ),
            (
                {"type": "ERROR", "payload": {"message": "날짜가 없습니다."}},
                ErrorAction("날짜가 없습니다."),
            ),
        ]
        for data, expected in cases:
            with self.subTest(type=data["type"]):
                self.assertEqual(action_from_dict(data), expected)

    def test_unknown_type(self):
        """알 수 없는 액션 타입 테스트"""
        with self.assertRaises(InvalidActionError):
            action_from_dict({"type": "DELETE_EVENT", "payload": {}})
        with self.assertRaises(InvalidActionError):
            action_from_dict({"payload": {}})
        with self.assertRaises(InvalidActionError):
            action_from_dict(["CREATE_EVENT"])

    def test_unknown_period(self):
        """알 수 없는 기간 테스트"""
        with self.assertRaises(InvalidActionError):
            action_from_dict({"type": "SUMMARIZE_EVENTS", "payload": {"period": "month"}})

    def test_invalid_payload(self):
        """payload 형식 오류 테스트"""
        with self.assertRaises(InvalidActionError):
            action_from_dict({"type": "READ_EVENTS", "payload": "2024-03-15"})

    def test_invalid_action_error_is_value_error(self):
        self.assertTrue(issubclass(InvalidActionError, ValueError))

    def test_action_to_dict(self):
        """액션 → 딕셔너리 변환 테스트"""
        self.assertEqual(
            action_to_dict(OpenProgramAction("spotify")),
            {"type": "OPEN_PROGRAM", "payload": {"programName": "spotify"}},
        )
        self.assertEqual(
            action_to_dict(SummarizeEventsAction(Period.TODAY)),
            {"type": "SUMMARIZE_EVENTS", "payload": {"period": "today"}},
        )


if __name__ == "__main__":
    unittest.main()
