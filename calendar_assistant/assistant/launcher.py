"""
외부 프로그램 실행 모듈

프로그램 이름으로 `<이름>://` 형식의 URI를 만들어 운영체제에 열기를 요청합니다.
실행 결과는 확인하지 않습니다.
"""

import os
import platform
import subprocess

SYSTEM = platform.system()


def build_program_uri(program_name):
    return f"{program_name}://"


def launch_program(program_name):
    """
    외부 프로그램 실행 요청

    Args:
        program_name (str): 실행할 프로그램 이름 (URI 스킴)
    """
    uri = build_program_uri(program_name)

    try:
        if SYSTEM == "Windows":
            os.startfile(uri)
        elif SYSTEM == "Darwin":  # macOS
            subprocess.Popen(["open", uri])
        else:
            subprocess.Popen(
                ["xdg-open", uri],
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
    except Exception as e:
        print(f"프로그램 실행 중 오류 발생 ({uri}): {e}")
