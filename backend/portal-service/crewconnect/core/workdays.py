from datetime import date, datetime, timedelta


def _as_date(value: date | datetime) -> date:
    # datetime은 date의 서브클래스라서 먼저 검사해야 한다
    if isinstance(value, datetime):
        return value.date()
    return value


def count_weekdays(from_date: date | datetime, to_date: date | datetime) -> int:
    """
    from_date ~ to_date(양 끝 포함) 사이의 평일(월~금) 수.

    시각은 무시하고 날짜만 본다. to_date가 from_date보다 앞서면 0.
    """
    start = _as_date(from_date)
    end = _as_date(to_date)
    if end < start:
        return 0

    total_days = (end - start).days + 1
    full_weeks, remainder = divmod(total_days, 7)
    count = full_weeks * 5

    # 남은 날짜(7일 미만)만 하나씩 확인
    day = start + timedelta(days=full_weeks * 7)
    for _ in range(remainder):
        if day.weekday() < 5:
            count += 1
        day += timedelta(days=1)
    return count
