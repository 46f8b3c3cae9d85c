"""
일정 포맷팅 모듈

이 모듈은 일정 정보를 사용자에게 보여줄 문장으로 변환합니다.
"""

from datetime import datetime

PERIOD_LABELS = {
    "today": "오늘",
    "tomorrow": "내일",
    "this_week": "이번 주",
}


def format_date(date_str):
    """
    날짜를 한국어 표기로 변환

    Args:
        date_str (str): 날짜 (YYYY-MM-DD 형식)

    Returns:
        str: 포맷팅된 날짜 (예: 2024년 3월 15일), 해석할 수 없으면 원래 문자열
    """
    try:
        date = datetime.strptime(date_str, "%Y-%m-%d")
    except (TypeError, ValueError):
        return date_str
    return f"{date.year}년 {date.month}월 {date.day}일"


def format_event_summary(event):
    """
    일정 한 줄 요약

    Args:
        event (Event): 일정

    Returns:
        str: 포맷팅된 일정 요약 정보
    """
    summary = f"{event.time} {event.title}"
    if event.description:
        summary += f" ({event.description})"
    return summary


def format_events_list(events):
    """
    일정 목록 포맷팅

    Args:
        events (list): 일정 목록

    Returns:
        str: 시간순으로 정렬된 일정 목록
    """
    if not events:
        return "일정이 없습니다."

    ordered = sorted(events, key=lambda event: event.time)
    return "\n".join(f"- {format_event_summary(event)}" for event in ordered)


def generate_summary_text(events, label):
    """
    일정 요약 문장 생성

    Args:
        events (list): 요약할 일정 목록
        label (str): 기간 이름 ('today', 'tomorrow', 'this_week') 또는 날짜

    Returns:
        str: 요약 문장 (일정이 없어도 항상 문장을 반환)
    """
    heading = PERIOD_LABELS.get(label) or format_date(label)

    if not events:
        return f"{heading}: 예정된 일정이 없습니다."

    return f"{heading} 일정은 {len(events)}개입니다:\n{format_events_list(events)}"
