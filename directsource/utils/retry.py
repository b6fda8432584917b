# directsource/utils/retry.py
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type
import requests
import redis

from directsource.utils.settings import RETRY_ATTEMPTS


def _retry_on(exc_type, multiplier: float, max_wait: float):
    return retry(
        reraise=True,
        stop=stop_after_attempt(RETRY_ATTEMPTS),
        wait=wait_exponential(multiplier=multiplier, min=multiplier, max=max_wait),
        retry=retry_if_exception_type(exc_type),
    )


#katalog: timeouty, bledy polaczenia i 5xx (404 obsluguje klient)
def http_retry():
    return _retry_on(requests.RequestException, multiplier=0.3, max_wait=3)


#koszyk goscia w redis
def redis_retry():
    return _retry_on(redis.RedisError, multiplier=0.2, max_wait=2)
