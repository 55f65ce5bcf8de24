from velox.controller.base import Controller


class GuestbookController(Controller):
    def indexAction(self, parameters):  # noqa: N802
        self.disable_view()
        self.echo("guestbook:", parameters.get("page", "1"))

    def signAction(self, parameters):  # noqa: N802
        self.disable_view()
        self.echo("signed")


class NotAController:
    def indexAction(self, parameters):  # noqa: N802
        pass
