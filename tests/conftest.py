import logging

import pytest
from pyspark.sql import SparkSession

# Name of the fixture that requires a local Spark session
_SPARK_FIXTURE_NAME = "spark_fixture"


def quiet_py4j() -> None:
    """Turn down Spark logging during the test context."""
    logging.getLogger("py4j").setLevel(logging.WARN)


@pytest.fixture(scope="session")
def spark_fixture():
    quiet_py4j()

    spark = (
        SparkSession.Builder()
        .appName("sink-config tests")
        # Only tiny DataFrames are built to check resolved field types.
        .master("local[1]")
        .config("spark.sql.shuffle.partitions", "1")
        .config("spark.default.parallelism", "1")
        .config("spark.ui.enabled", "false")
        .config("spark.ui.showConsoleProgress", "false")
        .config("spark.driver.memory", "1g")
        .getOrCreate()
    )

    yield spark

    spark.stop()


def _mark_tests_using_spark_fixture(tests: list[pytest.Item]) -> None:
    """Add the `requires_spark` marker to tests that use the Spark fixture."""
    for test in tests:
        if _SPARK_FIXTURE_NAME in getattr(test, "fixturenames", ()):
            test.add_marker(pytest.mark.requires_spark)


def pytest_addoption(parser: pytest.Parser):
    parser.addoption(
        "--include-spark-tests",
        action="store_true",
        default=False,
        help="Run tests that start a local SparkSession.",
    )


def pytest_configure(config: pytest.Config):
    config.addinivalue_line("markers", "requires_spark: test needs a local SparkSession")


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]):
    if not config.getoption("--include-spark-tests"):
        _mark_tests_using_spark_fixture(tests=items)


def _skip_spark_tests(test: pytest.Item) -> None:
    """Skip tests marked `requires_spark` unless `--include-spark-tests` was given."""
    if list(test.iter_markers(name="requires_spark")):
        pytest.skip("Skipped tests that require a SparkSession")


def pytest_runtest_setup(item: pytest.Item):
    if not item.config.getoption("--include-spark-tests"):
        _skip_spark_tests(test=item)
