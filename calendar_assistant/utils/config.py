"""
설정 파일 모듈

이 모듈은 애플리케이션의 설정을 관리합니다.
"""

import copy
import os
import json
import re
from dataclasses import dataclass

import yaml

_SUMMARY_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

DEFAULT_CONFIG = {
    "assistant": {
        "wake_word": "assistente",
        "summary_time": "08:00",
        "poll_interval": 30,
    },
    "speech": {
        "enabled": True,
        "model_name": "openai/whisper-large-v3",
        "language": "korean",
        "cache_dir": "models",
        "silence_threshold": 1000,
        "silence_duration": 2.0,
        "max_duration": 60,
    },
    "llm": {
        "model_type": "ollama",
        "model_name": "llama3",
        "cache_dir": "models",
        "ollama_url": "http://localhost:11434",
    },
}


@dataclass(frozen=True)
class Settings:
    """사용자 설정 (저장 시 통째로 교체됨)"""

    wake_word: str = "assistente"
    summary_time: str = "08:00"  # HH:MM

    def __post_init__(self):
        if not self.wake_word or not self.wake_word.strip():
            raise ValueError("호출어는 비어 있을 수 없습니다.")
        if not _SUMMARY_TIME_RE.match(self.summary_time or ""):
            raise ValueError(f"잘못된 요약 시간 형식: {self.summary_time}")


class Config:
    """설정 관리 클래스"""

    def __init__(self, config_path="config.yaml"):
        """
        Config 초기화

        Args:
            config_path (str): 설정 파일 경로
        """
        self.config_path = config_path
        self.config = self._load_config()

    def _load_config(self):
        """설정 파일 로드"""
        if not os.path.exists(self.config_path):
            # 기본 설정 생성 후 저장
            default_config = self._create_default_config()
            self._save_config(default_config)
            return default_config

        # 파일 확장자에 따라 로드 방식 결정
        ext = os.path.splitext(self.config_path)[1].lower()

        try:
            if ext == ".json":
                with open(self.config_path, "r", encoding="utf-8") as f:
                    loaded = json.load(f)
            elif ext in [".yaml", ".yml"]:
                with open(self.config_path, "r", encoding="utf-8") as f:
                    loaded = yaml.safe_load(f)
            else:
                print(f"지원하지 않는 설정 파일 형식: {ext}")
                return self._create_default_config()
        except Exception as e:
            print(f"설정 파일 로드 오류: {e}")
            return self._create_default_config()

        return self._merge_defaults(loaded or {})

    def _create_default_config(self):
        """기본 설정 생성"""
        return copy.deepcopy(DEFAULT_CONFIG)

    def _merge_defaults(self, loaded):
        """파일에 없는 섹션/키는 기본값으로 채움"""
        config = self._create_default_config()
        for section, values in loaded.items():
            if isinstance(values, dict) and section in config:
                config[section].update(values)
            else:
                config[section] = values
        return config

    def _save_config(self, config=None):
        """
        설정 파일 저장

        Args:
            config (dict): 저장할 설정 (None인 경우 현재 설정 사용)
        """
        if config is None:
            config = self.config

        ext = os.path.splitext(self.config_path)[1].lower()

        try:
            with open(self.config_path, "w", encoding="utf-8") as f:
                if ext == ".json":
                    json.dump(config, f, indent=2, ensure_ascii=False)
                else:
                    # 기본적으로 YAML 형식으로 저장
                    yaml.dump(config, f, default_flow_style=False, allow_unicode=True)
        except Exception as e:
            print(f"설정 파일 저장 오류: {e}")

    def get(self, section, key=None, default=None):
        """
        설정 값 가져오기

        Args:
            section (str): 설정 섹션
            key (str): 설정 키 (None인 경우 섹션 전체 반환)
            default: 기본값

        Returns:
            설정 값
        """
        if section not in self.config:
            return default

        if key is None:
            return self.config[section]

        return self.config[section].get(key, default)

    def update(self, section, values):
        """
        설정 섹션 업데이트

        Args:
            section (str): 설정 섹션
            values (dict): 업데이트할 값들
        """
        if section not in self.config:
            self.config[section] = {}

        self.config[section].update(values)
        self._save_config()

    def get_settings(self):
        """
        사용자 설정 가져오기

        Returns:
            Settings: 호출어와 요약 시간

        Raises:
            ValueError: 설정 파일의 값이 올바르지 않은 경우
        """
        assistant = self.get("assistant", default={})
        summary_time = assistant.get("summary_time", Settings.summary_time)
        if isinstance(summary_time, int):
            # YAML 1.1은 따옴표 없는 10:30을 60진수 정수(630)로 읽음
            summary_time = f"{summary_time // 60:02d}:{summary_time % 60:02d}"
        return Settings(
            wake_word=str(assistant.get("wake_word", Settings.wake_word)),
            summary_time=str(summary_time),
        )

    def save_settings(self, settings):
        """
        사용자 설정 저장 (호출어와 요약 시간을 함께 교체)

        Args:
            settings (Settings): 새 설정
        """
        self.update(
            "assistant",
            {"wake_word": settings.wake_word, "summary_time": settings.summary_time},
        )
