import unittest

from elevate_chat.store.subscriptions import ChangeNotifier


class ChangeNotifierTests(unittest.TestCase):
    def test_listeners_run_in_registration_order(self) -> None:
        notifier: ChangeNotifier[int] = ChangeNotifier()
        calls: list[str] = []
        notifier.add("k", lambda v: calls.append(f"a{v}"))
        notifier.add("k", lambda v: calls.append(f"b{v}"))

        notifier.notify("k", 1)

        self.assertEqual(["a1", "b1"], calls)

    def test_failing_listener_does_not_block_others(self) -> None:
        notifier: ChangeNotifier[int] = ChangeNotifier()
        calls: list[int] = []

        def broken(_: int) -> None:
            raise RuntimeError("boom")

        notifier.add("k", broken)
        notifier.add("k", calls.append)
        notifier.notify("k", 7)

        self.assertEqual([7], calls)

    def test_cancel_is_idempotent_and_removes_key(self) -> None:
        notifier: ChangeNotifier[int] = ChangeNotifier()
        subscription = notifier.add("k", lambda v: None)
        self.assertTrue(subscription.active)

        subscription.cancel()
        subscription.cancel()

        self.assertFalse(subscription.active)
        self.assertFalse(notifier.has_listeners("k"))


if __name__ == "__main__":
    unittest.main()
