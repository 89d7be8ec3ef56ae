"""
Unit tests for the onboarding state machine

Drives sessions through handle_response / handle_chat_message without any
transport and checks both the next step and the effects that come back.
"""

import unittest

from chatrelay.models.Outbound import Outbound
from chatrelay.models.Session import Session
from chatrelay.models.Step import Step
from chatrelay.services.onboarding import (CHAT_HINT, PROMPTS, WELCOME_MESSAGE,
                                           handle_chat_message, handle_response,
                                           room_created_message)
from chatrelay.storage.registry import RoomRegistry


class OnboardingTestCase(unittest.TestCase):

    def setUp(self):
        self.registry = RoomRegistry()

    def feed(self, session, *texts):
        """Feed several responses in a row, returning the final session and last effects"""
        effects = []
        for text in texts:
            session, effects = handle_response(session, text, self.registry)
        return session, effects

    def host_open_room(self, sid, username):
        session, _ = self.feed(Session(sid), "1", "1", username)
        return session

    def join_room(self, sid, room_id, username, passkey=None):
        texts = ["2", room_id] + ([passkey] if passkey is not None else []) + [username]
        session, _ = self.feed(Session(sid), *texts)
        return session


class TestChoiceStep(OnboardingTestCase):

    def test_host_option(self):
        session, effects = handle_response(Session("c1"), "1", self.registry)
        self.assertEqual(session.step, Step.HOST_TYPE)
        self.assertEqual(effects, [Outbound.prompt(PROMPTS[Step.HOST_TYPE])])

    def test_connect_option(self):
        session, effects = handle_response(Session("c1"), "2", self.registry)
        self.assertEqual(session.step, Step.CONNECT_ROOM)
        self.assertEqual(effects, [Outbound.prompt("Enter room ID: ")])

    def test_invalid_option_reprompts(self):
        session, effects = handle_response(Session("c1"), "3", self.registry)
        self.assertEqual(session.step, Step.CHOICE)
        self.assertEqual(effects, [
            Outbound.error("Invalid option. Choose 1 or 2."),
            Outbound.prompt(PROMPTS[Step.CHOICE]),
        ])

    def test_input_session_is_not_mutated(self):
        before = Session("c1")
        handle_response(before, "1", self.registry)
        self.assertEqual(before.step, Step.CHOICE)


class TestHostFlow(OnboardingTestCase):

    def test_open_room_creation(self):
        session, effects = self.feed(Session("c1"), "1", "1")

        self.assertEqual(session.step, Step.USERNAME)
        self.assertIsNotNone(session.room_id)
        room = self.registry.lookup(session.room_id)
        self.assertIsNone(room.get_passkey())
        self.assertEqual(room.get_members(), {})
        self.assertEqual(effects, [
            Outbound.message(room_created_message(session.room_id)),
            Outbound.prompt("Enter your username: "),
        ])

    def test_room_created_message_wording(self):
        self.assertEqual(
            room_created_message("abc"),
            "Room created with ID: abc\nShare this ID with others to join.",
        )
        self.assertEqual(
            room_created_message("abc", "secret"),
            "Room created with ID: abc\nShare this ID with others to join (passkey required).",
        )

    def test_private_room_creation(self):
        session, _ = self.feed(Session("c1"), "1", "2", "p1")
        self.assertEqual(session.step, Step.USERNAME)
        self.assertEqual(self.registry.lookup(session.room_id).get_passkey(), "p1")

    def test_invalid_host_type(self):
        session, effects = self.feed(Session("c1"), "1", "open")
        self.assertEqual(session.step, Step.HOST_TYPE)
        self.assertEqual(effects[-1], Outbound.prompt(PROMPTS[Step.HOST_TYPE]))
        self.assertEqual(len(self.registry), 0)

    def test_empty_passkey_rejected(self):
        session, effects = self.feed(Session("c1"), "1", "2", "")
        self.assertEqual(session.step, Step.HOST_PASSKEY)
        self.assertEqual(effects, [
            Outbound.error("Passkey cannot be empty."),
            Outbound.prompt("Set a passkey: "),
        ])
        self.assertEqual(len(self.registry), 0)

    def test_username_joins_and_announces(self):
        session, effects = self.feed(Session("conn1"), "1", "1", "alice")

        self.assertEqual(session.step, Step.CHAT)
        self.assertEqual(session.username, "alice")
        self.assertEqual(self.registry.lookup(session.room_id).get_members(), {"conn1": "alice"})
        self.assertEqual(effects, [
            Outbound.notice(session.room_id, "*** alice joined the chat ***"),
            Outbound.message(WELCOME_MESSAGE),
            Outbound.message(CHAT_HINT),
        ])

    def test_empty_username_rejected(self):
        session, effects = self.feed(Session("c1"), "1", "1", "")
        self.assertEqual(session.step, Step.USERNAME)
        self.assertEqual(effects, [
            Outbound.error("Username cannot be empty."),
            Outbound.prompt("Enter your username: "),
        ])
        self.assertEqual(self.registry.lookup(session.room_id).get_members(), {})

    def test_username_after_room_vanished_resets(self):
        session, _ = self.feed(Session("c1"), "1", "1")
        self.registry.leave(session.room_id, "c1")  # creator abandons the room

        session, effects = handle_response(session, "alice", self.registry)
        self.assertEqual(session.step, Step.CHOICE)
        self.assertIsNone(session.room_id)
        self.assertEqual(effects, [
            Outbound.error("Room no longer exists."),
            Outbound.prompt(PROMPTS[Step.CHOICE]),
        ])

    def test_usernames_are_not_sanitized(self):
        session, _ = self.feed(Session("c1"), "1", "1", "<b>al ice</b>")
        self.assertEqual(session.username, "<b>al ice</b>")


class TestConnectFlow(OnboardingTestCase):

    def test_unknown_room(self):
        session, effects = self.feed(Session("c2"), "2", "no-such-room")
        self.assertEqual(session.step, Step.CONNECT_ROOM)
        self.assertEqual(effects, [
            Outbound.error("Room does not exist."),
            Outbound.prompt("Enter room ID: "),
        ])

    def test_open_room_goes_straight_to_username(self):
        host = self.host_open_room("c1", "alice")
        session, effects = self.feed(Session("c2"), "2", host.room_id)

        self.assertEqual(session.step, Step.USERNAME)
        self.assertEqual(session.room_id, host.room_id)
        self.assertIsNone(session.pending_room_id)
        self.assertEqual(effects, [Outbound.prompt("Enter your username: ")])

    def test_passkey_room_challenges(self):
        room_id = self.registry.create_room("secret")
        self.registry.join(room_id, "c1", "host")

        session, effects = self.feed(Session("c2"), "2", room_id)
        self.assertEqual(session.step, Step.CONNECT_PASSKEY)
        self.assertEqual(session.pending_room_id, room_id)
        self.assertIsNone(session.room_id)
        self.assertEqual(effects, [Outbound.prompt("Enter passkey: ")])

    def test_wrong_then_right_passkey(self):
        room_id = self.registry.create_room("secret")
        self.registry.join(room_id, "c1", "host")
        session, _ = self.feed(Session("c2"), "2", room_id)

        session, effects = handle_response(session, "wrong", self.registry)
        self.assertEqual(session.step, Step.CONNECT_PASSKEY)
        self.assertEqual(effects, [
            Outbound.error("Invalid passkey."),
            Outbound.prompt("Enter passkey: "),
        ])

        for attempt in ["Secret", "secret ", ""]:
            session, _ = handle_response(session, attempt, self.registry)
            self.assertEqual(session.step, Step.CONNECT_PASSKEY)

        session, effects = handle_response(session, "secret", self.registry)
        self.assertEqual(session.step, Step.USERNAME)
        self.assertEqual(session.room_id, room_id)
        self.assertEqual(effects, [Outbound.prompt("Enter your username: ")])

    def test_passkey_after_room_deleted(self):
        room_id = self.registry.create_room("secret")
        self.registry.join(room_id, "c1", "host")
        session, _ = self.feed(Session("c2"), "2", room_id)

        self.registry.leave(room_id, "c1")
        session, effects = handle_response(session, "secret", self.registry)
        self.assertEqual(session.step, Step.CONNECT_PASSKEY)
        self.assertEqual(effects[0], Outbound.error("Invalid passkey."))

    def test_room_lookup_after_last_member_left(self):
        host = self.host_open_room("c1", "alice")
        self.registry.leave(host.room_id, "c1")

        session, effects = self.feed(Session("c2"), "2", host.room_id)
        self.assertEqual(session.step, Step.CONNECT_ROOM)
        self.assertEqual(effects[0], Outbound.error("Room does not exist."))


class TestChat(OnboardingTestCase):

    def test_relay_reaches_room(self):
        bob = self.host_open_room("bob-sid", "bob")
        self.join_room("carol-sid", bob.room_id, "carol")

        session, effects = handle_chat_message(bob, "hi", self.registry)
        self.assertEqual(session.step, Step.CHAT)
        self.assertEqual(effects, [Outbound.chat(bob.room_id, "bob", "hi")])

    def test_response_in_chat_is_relayed_too(self):
        bob = self.host_open_room("bob-sid", "bob")
        _, effects = handle_response(bob, "hello", self.registry)
        self.assertEqual(effects, [Outbound.chat(bob.room_id, "bob", "hello")])

    def test_empty_chat_line_ignored(self):
        bob = self.host_open_room("bob-sid", "bob")
        _, effects = handle_chat_message(bob, "", self.registry)
        self.assertEqual(effects, [])

    def test_chat_before_joining_is_private_error(self):
        session, _ = self.feed(Session("c1"), "1")
        after, effects = handle_chat_message(session, "hi", self.registry)

        self.assertEqual(after.step, Step.HOST_TYPE)
        self.assertEqual(effects, [
            Outbound.error("You must join a room before chatting."),
            Outbound.prompt(PROMPTS[Step.HOST_TYPE]),
        ])
        self.assertFalse(any(effect.is_broadcast() for effect in effects))

    def test_chat_after_room_vanished(self):
        bob = self.host_open_room("bob-sid", "bob")
        self.registry.leave(bob.room_id, "bob-sid")

        session, effects = handle_chat_message(bob, "hi", self.registry)
        self.assertEqual(session.step, Step.CHAT)
        self.assertEqual(effects, [Outbound.error("Not in a valid room or username not set.")])


class TestCorruptedState(OnboardingTestCase):

    def test_unknown_step_resets(self):
        session = Session("c1", step="bogus")
        session, effects = handle_response(session, "1", self.registry)
        self.assertEqual(session.step, Step.CHOICE)
        self.assertEqual(effects, [
            Outbound.error("Invalid state. Please reconnect."),
            Outbound.prompt(PROMPTS[Step.CHOICE]),
        ])

    def test_missing_step_resets(self):
        session, _ = handle_response(Session("c1", step=None), "2", self.registry)
        self.assertEqual(session.step, Step.CHOICE)

    def test_chat_step_without_room_resets(self):
        session = Session("c1", step=Step.CHAT)
        session, effects = handle_chat_message(session, "hi", self.registry)
        self.assertEqual(session.step, Step.CHOICE)
        self.assertEqual(effects[0], Outbound.error("Invalid state. Please reconnect."))

    def test_step_always_enumerated(self):
        inputs = ["", "1", "2", "x", "p1", "alice", "hi", "2", "1"]
        session = Session("c1")
        for text in inputs * 3:
            session, _ = handle_response(session, text, self.registry)
            self.assertIsInstance(session.step, Step)
            self.assertTrue(session.is_consistent())


if __name__ == '__main__':
    unittest.main()
