"""
음성 기반 캘린더 어시스턴트 애플리케이션

이 모듈은 음성 인식, LLM, 명령어 파이프라인, 일일 요약 예약을 통합하여
대화형 캘린더 어시스턴트를 제공합니다.
"""

import asyncio
import threading
from datetime import datetime

from calendar_assistant.assistant.dispatcher import ActionDispatcher
from calendar_assistant.assistant.pipeline import CommandPipeline
from calendar_assistant.assistant.scheduler import DailySummaryTrigger
from calendar_assistant.calendar.event_store import Event, EventStore, Sender, new_id
from calendar_assistant.calendar.formatter import format_date, format_events_list
from calendar_assistant.llm.llm_processor import LLMProcessor
from calendar_assistant.utils.config import Config, Settings

GREETING = "안녕하세요! 캘린더 어시스턴트입니다. 무엇을 도와드릴까요?"

SENDER_LABELS = {
    Sender.USER: "나",
    Sender.ASSISTANT: "어시스턴트",
    Sender.SYSTEM: "시스템",
}


def sample_events(today=None):
    """오늘 날짜의 예시 일정 두 개"""
    today = today or datetime.now().strftime("%Y-%m-%d")
    return [
        Event(
            id=new_id(),
            title="팀 회의",
            date=today,
            time="10:00",
            description="주간 계획 회의",
        ),
        Event(id=new_id(), title="고객 점심", date=today, time="13:00"),
    ]


class CalendarAssistantApp:
    """캘린더 어시스턴트 애플리케이션 클래스"""

    def __init__(self, config_path="config.yaml", interpreter=None, speech_recognizer=None):
        """
        CalendarAssistantApp 초기화

        Args:
            config_path (str): 설정 파일 경로
            interpreter: 명령어 해석기 (None인 경우 설정에 따라 LLMProcessor 생성)
            speech_recognizer: 음성 인식기 (None이고 음성이 켜져 있으면 생성)
        """
        # 설정 로드
        self.config = Config(config_path)
        try:
            self.settings = self.config.get_settings()
        except ValueError as e:
            print(f"설정 값 오류: {e} (기본 설정을 사용합니다)")
            self.settings = Settings()

        # 일정/메시지 저장소
        self.store = EventStore(events=sample_events())
        self.store.subscribe(self._print_message)
        self.store.add_message(GREETING, Sender.ASSISTANT)

        # LLM 모듈 초기화
        if interpreter is None:
            llm_config = self.config.get("llm")
            interpreter = LLMProcessor(
                model_type=llm_config.get("model_type", "ollama"),
                model_name=llm_config.get("model_name", "llama3"),
                cache_dir=llm_config.get("cache_dir", "models"),
                ollama_url=llm_config.get("ollama_url", "http://localhost:11434"),
            )
        self.interpreter = interpreter

        self.dispatcher = ActionDispatcher(self.store)
        self.pipeline = CommandPipeline(self.store, self.interpreter, self.dispatcher)
        self.trigger = DailySummaryTrigger(
            self.pipeline,
            self.get_settings,
            poll_interval=self.config.get("assistant", "poll_interval", 30),
        )

        # 음성 인식 모듈 초기화
        speech_config = self.config.get("speech")
        if speech_recognizer is None and speech_config.get("enabled", True):
            from calendar_assistant.speech.speech_recognizer import SpeechRecognizer

            speech_recognizer = SpeechRecognizer(
                model_name=speech_config.get("model_name", "openai/whisper-large-v3"),
                language=speech_config.get("language", "korean"),
                cache_dir=speech_config.get("cache_dir", "models"),
            )
        self.speech_recognizer = speech_recognizer
        self._stop_listening = threading.Event()
        self._listener_thread = None

    def get_settings(self):
        return self.settings

    def save_settings(self, settings):
        """
        설정 교체 및 저장

        다음 시각 확인이나 다음 발화부터 새 설정이 적용됩니다.
        """
        self.settings = settings
        self.config.save_settings(settings)

    def _print_message(self, message):
        print(f"[{SENDER_LABELS[message.sender]}] {message.text}", flush=True)

    def run(self):
        """애플리케이션 실행"""
        print("캘린더 어시스턴트를 시작합니다. (/events, /settings, /quit)")
        try:
            asyncio.run(self.run_async())
        except KeyboardInterrupt:
            pass
        print("프로그램을 종료합니다.")

    async def run_async(self):
        """이벤트 루프 안에서 예약 확인, 음성 인식, 텍스트 입력을 함께 실행"""
        async with self.trigger:
            self.start_listening(asyncio.get_running_loop())
            try:
                await self._input_loop()
            finally:
                self.stop_listening()

    def start_listening(self, loop):
        """
        음성 인식 스레드 시작

        Args:
            loop: 명령어를 전달받을 이벤트 루프
        """
        if self.speech_recognizer is None:
            print("음성 인식이 꺼져 있습니다.")
            return
        if not self.speech_recognizer.is_supported():
            print("음성 입력 장치를 찾을 수 없습니다. 텍스트 입력만 사용합니다.")
            return

        def on_command(command):
            if self._stop_listening.is_set():
                return
            try:
                loop.call_soon_threadsafe(self.pipeline.submit, command)
            except RuntimeError as e:
                # 종료 중 이벤트 루프가 이미 닫힌 경우
                print(f"음성 명령어 전달 실패: {e}")

        speech_config = self.config.get("speech")
        self._stop_listening.clear()
        self._listener_thread = threading.Thread(
            target=self.speech_recognizer.listen,
            args=(on_command, self.get_settings, self._stop_listening),
            kwargs={
                "silence_threshold": speech_config.get("silence_threshold", 1000),
                "silence_duration": speech_config.get("silence_duration", 2.0),
                "max_duration": speech_config.get("max_duration", 60),
            },
            daemon=True,
        )
        self._listener_thread.start()
        print(f"음성 인식 대기 중... '{self.settings.wake_word}'(이)라고 불러주세요.")

    def stop_listening(self):
        """음성 인식 스레드 중지"""
        self._stop_listening.set()
        self._listener_thread = None

    async def _input_loop(self):
        while True:
            try:
                line = await asyncio.to_thread(input, "> ")
            except EOFError:
                return

            line = line.strip()
            if line == "/quit":
                return
            if line == "/events":
                self.show_events()
            elif line == "/settings":
                await self.change_settings()
            else:
                self.pipeline.submit(line)

    def show_events(self):
        """저장된 일정 목록 출력"""
        events = self.store.events
        if not events:
            print("일정이 없습니다.")
            return

        dates = sorted({event.date for event in events})
        for date in dates:
            print(f"\n{format_date(date)}")
            print(format_events_list(self.store.events_on(date)))

    async def change_settings(self):
        """설정 변경 (변경하지 않는 값은 기존 값 유지, 저장 시 통째로 교체)"""
        current = self.settings
        print("\n변경할 설정을 입력하세요 (변경하지 않으려면 빈칸으로 두세요):")
        wake_word = await asyncio.to_thread(input, f"호출어 ({current.wake_word}): ")
        summary_time = await asyncio.to_thread(
            input, f"요약 시간 HH:MM ({current.summary_time}): "
        )

        try:
            settings = Settings(
                wake_word=wake_word.strip() or current.wake_word,
                summary_time=summary_time.strip() or current.summary_time,
            )
        except ValueError as e:
            print(f"설정 변경 실패: {e}")
            return

        self.save_settings(settings)
        print("설정이 저장되었습니다.")
