import pytest
from ratewarden import evaluate_error_policy, match_all_errors


class CustomError(Exception):
    pass


class SubCustomError(CustomError):
    pass


async def test_default_policy_matches_everything():
    assert await evaluate_error_policy(match_all_errors, ValueError())
    assert await evaluate_error_policy(match_all_errors, KeyboardInterrupt())


@pytest.mark.parametrize(
    ("error", "expected"),
    [
        (CustomError(), True),
        (SubCustomError(), True),
        (ValueError(), False),
    ],
)
async def test_exception_class_policy(error, expected):
    assert await evaluate_error_policy(CustomError, error) is expected


async def test_tuple_policy_matches_any_class():
    policy = (KeyError, CustomError)

    assert await evaluate_error_policy(policy, KeyError())
    assert await evaluate_error_policy(policy, SubCustomError())
    assert not await evaluate_error_policy(policy, ValueError())


async def test_sync_predicate():
    def policy(error: BaseException) -> bool:
        return "retry" in str(error)

    assert await evaluate_error_policy(policy, ValueError("please retry"))
    assert not await evaluate_error_policy(policy, ValueError("fatal"))


async def test_async_predicate():
    async def policy(error: BaseException) -> bool:
        return isinstance(error, TimeoutError)

    assert await evaluate_error_policy(policy, TimeoutError())
    assert not await evaluate_error_policy(policy, ValueError())


async def test_truthy_results_are_coerced_to_bool():
    assert await evaluate_error_policy(lambda error: "yes", ValueError()) is True
    assert await evaluate_error_policy(lambda error: 0, ValueError()) is False


async def test_predicate_errors_propagate():
    def policy(error: BaseException) -> bool:
        raise RuntimeError("broken policy")

    with pytest.raises(RuntimeError, match="broken policy"):
        _ = await evaluate_error_policy(policy, ValueError())
