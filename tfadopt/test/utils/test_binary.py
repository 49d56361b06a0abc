from unittest.mock import MagicMock

import pytest
from pytest_mock import MockerFixture

from tfadopt.utils.binary import BinaryNotFoundError, binary_option, ensure_binaries


@pytest.fixture
def which(mocker: MockerFixture) -> MagicMock:
    return mocker.patch("tfadopt.utils.binary.shutil.which")


def test_ensure_binaries(which: MagicMock) -> None:
    which.return_value = "/usr/bin/tofu"
    ensure_binaries(["tofu"])
    which.assert_called_once_with("tofu")


def test_ensure_binaries_missing(which: MagicMock) -> None:
    which.return_value = None
    with pytest.raises(BinaryNotFoundError, match="terraform"):
        ensure_binaries(["terraform"])


def test_binary_option(which: MagicMock) -> None:
    which.return_value = "/usr/bin/terraform"

    @binary_option("binary")
    def f(binary: str) -> str:
        return binary

    assert f(binary="terraform") == "terraform"
    which.assert_called_once_with("terraform")
