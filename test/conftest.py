import logging
import pytest
from pyrv.log import logger
from pyrv.models.singlecycle import SingleCycle, SingleCycleModel


@pytest.fixture(autouse=True)
def enable_log():
    old_level = logger.level
    logger.setLevel(logging.DEBUG)
    yield
    logger.setLevel(old_level)


@pytest.fixture
def core() -> SingleCycle:
    core = SingleCycle(imem_size=1024, dmem_size=1024)
    core.name = "core"
    core._init()
    return core


@pytest.fixture
def model() -> SingleCycleModel:
    return SingleCycleModel()
