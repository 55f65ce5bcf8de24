import velox_missing_dependency  # noqa: F401

from velox.controller.base import Controller


class BrokenController(Controller):
    def indexAction(self, parameters):  # noqa: N802
        pass
