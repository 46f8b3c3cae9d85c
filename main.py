"""
음성 기반 캘린더 어시스턴트 메인 실행 파일

음성(호출어 + 명령어) 또는 텍스트로 일정을 추가하고 조회할 수 있으며,
설정된 시각에 하루 한 번 오늘 일정을 요약해 줍니다.
"""

from calendar_assistant.app import CalendarAssistantApp


def main():
    """메인 함수"""
    app = CalendarAssistantApp()
    app.run()


if __name__ == "__main__":
    main()
