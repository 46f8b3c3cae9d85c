"""
음성 인식 모듈

이 모듈은 마이크로부터 음성을 녹음하고, 음성을 텍스트로 변환한 뒤
호출어로 시작하는 발화만 명령어로 전달하는 기능을 제공합니다.
"""

import os
import re
import time
import wave
import platform
import subprocess
import numpy as np
import pyaudio
import torch
from transformers import AutoProcessor, AutoModelForSpeechSeq2Seq, pipeline

# 플랫폼 확인
SYSTEM = platform.system()

if SYSTEM == "Windows":
    import winsound

_LEADING_PUNCTUATION = re.compile(r"^[\s,.!?:;~-]+")


def extract_command(text, wake_word):
    """
    호출어로 시작하는 발화에서 명령어 추출

    Args:
        text (str): 인식된 텍스트
        wake_word (str): 호출어 (대소문자 구분 없음)

    Returns:
        str: 호출어 뒤의 명령어 (호출어가 없거나 명령어가 비어 있으면 None)
    """
    if not text or not wake_word:
        return None

    spoken = text.strip()
    wake = wake_word.strip().lower()
    index = spoken.lower().find(wake)
    if index < 0:
        return None

    command = _LEADING_PUNCTUATION.sub("", spoken[index + len(wake) :]).strip()
    return command or None


class SpeechRecognizer:
    """음성 인식 클래스"""

    def __init__(
        self,
        model_name="openai/whisper-large-v3",
        language="korean",
        cache_dir="models",
        notification_sound="calendar_assistant/speech/sounds/start_recording.wav",
    ):
        """
        SpeechRecognizer 초기화

        Args:
            model_name (str): 사용할 음성 인식 모델 이름
            language (str): 인식할 언어
            cache_dir (str): 모델 캐시 디렉토리
            notification_sound (str): 녹음 시작 알림 소리 파일 경로
        """
        self.model_name = model_name
        self.language = language
        self.cache_dir = cache_dir
        self.device = "cuda" if torch.cuda.is_available() else "cpu"
        self.processor = None
        self.model = None
        self.pipe = None
        self.notification_sound = notification_sound
        self.listening = False

        # 모델 디렉토리 생성
        os.makedirs(cache_dir, exist_ok=True)

    def is_supported(self):
        """
        음성 입력 장치 사용 가능 여부

        Returns:
            bool: 입력 장치가 하나 이상 있으면 True
        """
        try:
            p = pyaudio.PyAudio()
        except Exception as e:
            print(f"오디오 장치 확인 중 오류 발생: {e}")
            return False

        try:
            return any(
                p.get_device_info_by_index(i).get("maxInputChannels", 0) > 0
                for i in range(p.get_device_count())
            )
        finally:
            p.terminate()

    def play_notification(self):
        """녹음 시작 알림 소리 재생"""
        if not os.path.exists(self.notification_sound):
            return

        try:
            if SYSTEM == "Windows":
                winsound.PlaySound(self.notification_sound, winsound.SND_FILENAME)
            elif SYSTEM == "Darwin":  # macOS
                subprocess.call(["afplay", self.notification_sound])
            elif SYSTEM == "Linux":
                subprocess.call(["aplay", "-q", self.notification_sound])
        except Exception as e:
            print(f"알림 소리 재생 중 오류 발생: {e}")

    def load_model(self):
        """음성 인식 모델 로드"""
        print(f"음성 인식 모델 로드 중: {self.model_name}")

        self.processor = AutoProcessor.from_pretrained(
            self.model_name, cache_dir=self.cache_dir
        )

        self.model = AutoModelForSpeechSeq2Seq.from_pretrained(
            self.model_name,
            torch_dtype=torch.float16 if self.device == "cuda" else torch.float32,
            cache_dir=self.cache_dir,
        ).to(self.device)

        self.pipe = pipeline(
            "automatic-speech-recognition",
            model=self.model,
            tokenizer=self.processor.tokenizer,
            feature_extractor=self.processor.feature_extractor,
            chunk_length_s=30,
            batch_size=16,
            device=self.device,
        )

        print("모델 로드 완료")

    def record_audio(
        self,
        filename="recorded_audio.wav",
        silence_threshold=1000,
        silence_duration=2.0,
        max_duration=60,
    ):
        """
        마이크로부터 음성 녹음 (무음이 이어지면 자동 종료)

        Args:
            filename (str): 녹음 파일 저장 경로
            silence_threshold (int): 무음 감지 임계값
            silence_duration (float): 무음 감지 지속 시간 (초)
            max_duration (int): 최대 녹음 시간 (초)

        Returns:
            str: 녹음 파일 경로
        """
        CHUNK = 1024
        FORMAT = pyaudio.paInt16
        CHANNELS = 1
        RATE = 16000

        p = pyaudio.PyAudio()
        stream = None

        try:
            stream = p.open(
                format=FORMAT,
                channels=CHANNELS,
                rate=RATE,
                input=True,
                frames_per_buffer=CHUNK,
            )

            self.play_notification()

            frames = []
            silent_chunks = 0
            silent_limit = int(silence_duration * RATE / CHUNK)
            start_time = time.time()

            # 처음 0.5초 동안의 배경 소음 레벨 측정
            background_frames = []
            for _ in range(int(0.5 * RATE / CHUNK)):
                data = stream.read(CHUNK, exception_on_overflow=False)
                background_frames.append(data)

            background_samples = np.frombuffer(
                b"".join(background_frames), dtype=np.int16
            )
            background_rms = np.sqrt(
                np.mean(background_samples.astype(np.float64) ** 2)
            )

            # 배경 소음 레벨에 따라 임계값 조정
            adjusted_threshold = max(silence_threshold, background_rms * 2)

            while True:
                data = stream.read(CHUNK, exception_on_overflow=False)
                frames.append(data)

                current_samples = np.frombuffer(data, dtype=np.int16)
                current_rms = np.sqrt(np.mean(current_samples.astype(np.float64) ** 2))

                # 무음 감지
                if current_rms < adjusted_threshold:
                    silent_chunks += 1
                    if silent_chunks >= silent_limit:
                        break
                else:
                    silent_chunks = 0

                # 최대 녹음 시간 체크
                if time.time() - start_time > max_duration:
                    break

            sample_width = p.get_sample_size(FORMAT)
        finally:
            # 녹음 중 오류가 나도 장치는 반드시 해제
            if stream is not None:
                stream.stop_stream()
                stream.close()
            p.terminate()

        # 녹음 파일 저장
        wf = wave.open(filename, "wb")
        wf.setnchannels(CHANNELS)
        wf.setsampwidth(sample_width)
        wf.setframerate(RATE)
        wf.writeframes(b"".join(frames))
        wf.close()

        return filename

    def transcribe(self, audio_file):
        """
        음성 파일을 텍스트로 변환

        Args:
            audio_file (str): 음성 파일 경로

        Returns:
            str: 변환된 텍스트
        """
        if not self.pipe:
            self.load_model()

        result = self.pipe(
            audio_file,
            generate_kwargs={
                "language": self.language,
                "max_new_tokens": 128,
                "forced_decoder_ids": None,  # language 설정이 우선되도록 None으로 설정
            },
        )

        return result["text"].strip()

    def listen(self, on_command, get_settings, stop_event, **record_options):
        """
        호출어 대기 루프 (별도 스레드에서 실행)

        녹음 → 텍스트 변환 → 호출어 확인을 반복하며, 호출어 뒤의 명령어를
        on_command로 전달합니다. 호출어는 매 발화마다 get_settings()에서 새로 읽습니다.

        Args:
            on_command (callable): 명령어 문자열을 받는 함수
            get_settings (callable): 현재 Settings를 반환하는 함수
            stop_event (threading.Event): 설정되면 루프 종료
            **record_options: record_audio에 전달할 인자
        """
        self.listening = True
        try:
            while not stop_event.is_set():
                try:
                    audio_file = self.record_audio(**record_options)
                    text = self.transcribe(audio_file)
                except Exception as e:
                    print(f"음성 인식 중 오류 발생: {e}")
                    stop_event.wait(1.0)
                    continue

                if stop_event.is_set():
                    break

                command = extract_command(text, get_settings().wake_word)
                if command:
                    on_command(command)
        finally:
            self.listening = False
