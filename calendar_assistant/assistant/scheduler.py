"""
일일 요약 예약 모듈

설정된 시각(HH:MM)이 되면 하루 한 번 "오늘 일정 요약" 명령어를 파이프라인에 제출합니다.
"""

import asyncio
from datetime import datetime

SUMMARY_COMMAND = "오늘 하루 일정을 요약해 줘"


class DailySummaryTrigger:
    """하루 한 번 요약 명령어를 제출하는 예약 클래스"""

    def __init__(self, pipeline, get_settings, poll_interval=30, now=datetime.now):
        """
        DailySummaryTrigger 초기화

        Args:
            pipeline (CommandPipeline): 명령어 처리 파이프라인
            get_settings (callable): 현재 Settings를 반환하는 함수
            poll_interval (float): 시각 확인 주기 (초)
            now (callable): 현재 시각을 반환하는 함수
        """
        self.pipeline = pipeline
        self.get_settings = get_settings
        self.poll_interval = poll_interval
        self.now = now
        self.last_fired_date = None
        self._task = None

    def check(self):
        """
        현재 시각 확인 및 요약 명령어 제출

        파이프라인이 처리 중이라 명령어가 버려져도 그날은 다시 시도하지 않습니다.

        Returns:
            bool: 이번 확인에서 요약이 실행되었는지 여부
        """
        now = self.now()
        current_time = now.strftime("%H:%M")
        today = now.date().isoformat()

        if current_time != self.get_settings().summary_time:
            return False
        if self.last_fired_date == today:
            return False

        self.last_fired_date = today
        if self.pipeline.submit(SUMMARY_COMMAND) is None:
            print("파이프라인이 처리 중이어서 오늘의 일정 요약을 건너뜁니다.")
        return True

    @property
    def running(self):
        return self._task is not None and not self._task.done()

    def start(self):
        """주기적인 시각 확인 시작 (실행 중인 이벤트 루프 필요)"""
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._poll())

    async def stop(self):
        """주기적인 시각 확인 중지"""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def _poll(self):
        while True:
            await asyncio.sleep(self.poll_interval)
            self.check()

    async def __aenter__(self):
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.stop()
