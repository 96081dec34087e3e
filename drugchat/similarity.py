"""코사인 유사도 계산. I/O 없는 순수 함수."""

import math
from collections.abc import Sequence

from drugchat.errors import DimensionMismatch


def _scaled(vec: Sequence[float]) -> list[float] | None:
    """최대 절댓값으로 나눠 성분을 [-1, 1]로 맞춘다. 크기가 0이면 None.

    제곱/곱셈 전에 스케일을 맞춰야 아주 작은 값의 언더플로와 큰 값의
    오버플로를 피할 수 있다. 방향은 바뀌지 않으므로 코사인 값도 같다.
    """
    peak = max((abs(x) for x in vec), default=0.0)
    if peak == 0.0:
        return None
    return [x / peak for x in vec]


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """두 벡터의 코사인 유사도를 [-1, 1] 범위로 반환한다.

    길이가 다르면 DimensionMismatch. 어느 한쪽의 크기가 0이면 나눗셈이
    정의되지 않으므로 NaN 대신 0.0을 반환한다. 무한대가 섞여 결과가 NaN이
    되는 경우도 0.0이다.
    """
    if len(a) != len(b):
        raise DimensionMismatch(len(a), len(b))

    sa = _scaled(a)
    sb = _scaled(b)
    if sa is None or sb is None:
        return 0.0

    dot = math.fsum(x * y for x, y in zip(sa, sb))
    norm_a = math.sqrt(math.fsum(x * x for x in sa))
    norm_b = math.sqrt(math.fsum(y * y for y in sb))

    result = dot / (norm_a * norm_b)
    if math.isnan(result):
        return 0.0

    # 부동소수점 오차로 1을 살짝 넘는 경우를 잘라낸다
    return max(-1.0, min(1.0, result))
