"""
LLM 처리 모듈

이 모듈은 사용자 명령어를 해석해 구조화된 어시스턴트 액션으로 변환하는 LLM 기능을 제공합니다.
Hugging Face 모델과 Ollama 로컬 모델을 지원합니다.
"""

import asyncio
import json
import os
from datetime import datetime

import requests
import torch
from transformers import AutoTokenizer, AutoModelForCausalLM

from calendar_assistant.assistant.actions import (
    ErrorAction,
    InvalidActionError,
    action_from_dict,
)

PROMPT_TEMPLATE = """
당신은 캘린더 어시스턴트입니다. 사용자의 명령어를 아래 액션 중 정확히 하나로 변환하세요.

오늘 날짜: {today}

현재 일정 목록 (JSON):
{events}

액션 형식:
- {{"type": "CREATE_EVENT", "payload": {{"title": "제목", "date": "YYYY-MM-DD", "time": "HH:MM", "description": "설명 (선택)"}}}}
- {{"type": "READ_EVENTS", "payload": {{"date": "YYYY-MM-DD"}}}}
- {{"type": "SUMMARIZE_EVENTS", "payload": {{"period": "today" | "tomorrow" | "this_week"}}}}
- {{"type": "OPEN_PROGRAM", "payload": {{"programName": "프로그램 이름"}}}}
- {{"type": "GENERAL_RESPONSE", "payload": {{"text": "답변"}}}}
- {{"type": "ERROR", "payload": {{"message": "명령어를 처리할 수 없는 이유"}}}}

명령어: {command}

JSON 객체 하나로만 응답해주세요.
"""


class LLMProcessor:
    """LLM 처리 클래스"""

    def __init__(
        self,
        model_type="ollama",
        model_name="llama3",
        cache_dir="models",
        ollama_url="http://localhost:11434",
    ):
        """
        LLMProcessor 초기화

        Args:
            model_type (str): 사용할 모델 유형 ('huggingface' 또는 'ollama')
            model_name (str): 사용할 모델 이름
            cache_dir (str): 모델 캐시 디렉토리
            ollama_url (str): Ollama 서버 주소
        """
        self.model_type = model_type
        self.model_name = model_name
        self.cache_dir = cache_dir
        self.ollama_url = ollama_url.rstrip("/")
        self.device = "cuda" if torch.cuda.is_available() else "cpu"
        self.tokenizer = None
        self.model = None

        # 모델 디렉토리 생성
        os.makedirs(cache_dir, exist_ok=True)

    def load_model(self):
        """LLM 모델 로드"""
        if self.model_type == "huggingface":
            print(f"Hugging Face 모델 로드 중: {self.model_name}")

            self.tokenizer = AutoTokenizer.from_pretrained(
                self.model_name, cache_dir=self.cache_dir
            )

            self.model = AutoModelForCausalLM.from_pretrained(
                self.model_name,
                torch_dtype=torch.float16 if self.device == "cuda" else torch.float32,
                cache_dir=self.cache_dir,
            ).to(self.device)

            print("모델 로드 완료")

        elif self.model_type == "ollama":
            print(f"Ollama 모델 확인 중: {self.model_name}")
            # Ollama는 API 호출 시 모델을 로드하므로 여기서는 모델 존재 여부만 확인
            try:
                response = requests.get(f"{self.ollama_url}/api/tags")
                if response.status_code == 200:
                    models = response.json().get("models", [])
                    model_exists = any(
                        model["name"] == self.model_name
                        or model["name"].split(":")[0] == self.model_name
                        for model in models
                    )

                    if not model_exists:
                        print(
                            f"경고: Ollama에 {self.model_name} 모델이 없습니다. 먼저 'ollama pull {self.model_name}' 명령으로 모델을 다운로드하세요."
                        )
                else:
                    print(
                        "경고: Ollama 서버에 연결할 수 없습니다. Ollama가 실행 중인지 확인하세요."
                    )
            except Exception as e:
                print(f"Ollama 서버 연결 오류: {e}")
                print("Ollama가 설치되어 있고 실행 중인지 확인하세요.")
        else:
            raise ValueError(f"지원하지 않는 모델 유형: {self.model_type}")

    async def interpret(self, command, events):
        """
        명령어를 어시스턴트 액션으로 변환

        모델 호출은 이벤트 루프를 막지 않도록 별도 스레드에서 실행됩니다.

        Args:
            command (str): 사용자 명령어
            events (sequence): 현재 일정 목록 (문맥으로 전달)

        Returns:
            액션 객체 (해석할 수 없는 응답은 ErrorAction)
        """
        return await asyncio.to_thread(self.extract_action, command, events)

    def extract_action(self, command, events):
        """명령어를 어시스턴트 액션으로 변환 (동기 호출)"""
        prompt = self.build_prompt(command, events)

        if self.model_type == "huggingface":
            response_text = self._generate_with_huggingface(prompt)
        elif self.model_type == "ollama":
            response_text = self._generate_with_ollama(prompt)
        else:
            raise ValueError(f"지원하지 않는 모델 유형: {self.model_type}")

        return self._parse_action(response_text)

    def build_prompt(self, command, events, today=None):
        """
        프롬프트 생성

        Args:
            command (str): 사용자 명령어
            events (sequence): 현재 일정 목록
            today (str): 오늘 날짜 (YYYY-MM-DD 형식, None인 경우 현재 날짜)

        Returns:
            str: 모델에 전달할 프롬프트
        """
        if today is None:
            today = datetime.now().strftime("%Y-%m-%d")

        events_json = json.dumps(
            [
                {
                    "id": event.id,
                    "title": event.title,
                    "date": event.date,
                    "time": event.time,
                    "description": event.description,
                }
                for event in events
            ],
            ensure_ascii=False,
            indent=2,
        )

        return PROMPT_TEMPLATE.format(today=today, events=events_json, command=command)

    def _generate_with_huggingface(self, prompt):
        """Hugging Face 모델을 사용하여 응답 생성"""
        if not self.model or not self.tokenizer:
            self.load_model()

        inputs = self.tokenizer(prompt, return_tensors="pt").to(self.device)
        outputs = self.model.generate(
            inputs.input_ids,
            max_new_tokens=256,
            temperature=0.1,
            top_p=0.95,
            do_sample=True,
        )
        # 프롬프트 부분을 제외한 생성 결과만 디코딩
        generated = outputs[0][inputs.input_ids.shape[-1] :]
        return self.tokenizer.decode(generated, skip_special_tokens=True)

    def _generate_with_ollama(self, prompt):
        """Ollama 모델을 사용하여 응답 생성 (연결 오류는 호출자에게 전달)"""
        response = requests.post(
            f"{self.ollama_url}/api/generate",
            json={
                "model": self.model_name,
                "prompt": prompt,
                "stream": False,
                "format": "json",
            },
        )
        response.raise_for_status()
        return response.json().get("response", "")

    def _parse_action(self, text):
        """응답 텍스트에서 액션 파싱"""
        # JSON 블록 찾기
        json_start = text.find("{")
        json_end = text.rfind("}") + 1

        if json_start < 0 or json_end <= json_start:
            return ErrorAction(message="명령어를 이해하지 못했습니다.")

        try:
            return action_from_dict(json.loads(text[json_start:json_end]))
        except json.JSONDecodeError:
            return ErrorAction(message="응답 형식이 올바르지 않습니다.")
        except InvalidActionError as e:
            return ErrorAction(message=str(e))
