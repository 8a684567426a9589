from __future__ import annotations

import tempfile
from pathlib import Path

from yamlpack import YamlPack


def before_scenario(context, scenario) -> None:
    """
    Behave hook executed before each scenario.

    :param context: Behave context object.
    :type context: object
    :param scenario: Behave scenario.
    :type scenario: object
    :return: None.
    :rtype: None
    """
    context._tmp = tempfile.TemporaryDirectory(prefix="yamlpack-bdd-")
    context.workdir = Path(context._tmp.name)
    context.pack = YamlPack()
    context.last_error = None
    context.last_sub = None
    context.last_decoded = None


def after_scenario(context, scenario) -> None:
    """
    Behave hook executed after each scenario.

    :param context: Behave context object.
    :type context: object
    :param scenario: Behave scenario.
    :type scenario: object
    :return: None.
    :rtype: None
    """
    tmp = getattr(context, "_tmp", None)
    if tmp is not None:
        tmp.cleanup()
        context._tmp = None
