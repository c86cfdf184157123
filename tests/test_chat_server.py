#!/usr/bin/env python3
"""
Unit tests for server/chat/chat_server.py

Tests the connection lifecycle and fan-out:
- Username assignment and announcements on connect
- Cleanup and announcements on disconnect
- Chat message relay, including unknown senders
- Delivery isolation between connections
"""

import asyncio
import json
import unittest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from common.constants import EventTypes
from server.chat.chat_server import ChatServer


class FakeWriter:
    """Collects frames written by the chat server."""

    def __init__(self):
        self.frames = []
        self.closed = False

    def write(self, data: bytes):
        self.frames.append(data)

    async def drain(self):
        pass

    def close(self):
        self.closed = True

    @property
    def messages(self):
        return [json.loads(frame) for frame in self.frames]

    def of_type(self, msg_type: str):
        return [m for m in self.messages if m.get('type') == msg_type]


class BrokenWriter(FakeWriter):
    def write(self, data: bytes):
        raise ConnectionResetError("peer gone")


class StalledWriter(FakeWriter):
    async def drain(self):
        await asyncio.sleep(3600)


class TestChatServerLifecycle(unittest.IsolatedAsyncioTestCase):
    """Test cases for connect, message and disconnect handling."""

    def setUp(self):
        """Set up test fixtures."""
        self.chat_server = ChatServer()

    async def test_connect_sends_username_roster_and_join(self):
        """Test the three notifications a new connection triggers."""
        writer = FakeWriter()
        username = await self.chat_server.handle_connect("c1", writer)

        self.assertEqual(username, "Bilal")
        self.assertEqual(writer.messages, [
            {"type": EventTypes.ASSIGNED_USERNAME, "username": "Bilal"},
            {"type": EventTypes.ONLINE_USERS, "users": ["Bilal"]},
            {"type": EventTypes.USER_JOINED, "username": "Bilal", "message": "Bilal has joined the chat"},
        ])

    async def test_existing_clients_see_new_participant(self):
        """Test that earlier connections receive roster and join, but not the assignment."""
        w1, w2 = FakeWriter(), FakeWriter()
        await self.chat_server.handle_connect("c1", w1)
        w1.frames.clear()

        await self.chat_server.handle_connect("c2", w2)

        self.assertEqual(w2.messages[0], {"type": EventTypes.ASSIGNED_USERNAME, "username": "Noman"})
        self.assertEqual(w1.messages, [
            {"type": EventTypes.ONLINE_USERS, "users": ["Bilal", "Noman"]},
            {"type": EventTypes.USER_JOINED, "username": "Noman", "message": "Noman has joined the chat"},
        ])

    async def test_lookup_matches_assigned_username(self):
        """Test that the registry holds the username sent to the client."""
        writer = FakeWriter()
        await self.chat_server.handle_connect("c1", writer)

        assigned = writer.of_type(EventTypes.ASSIGNED_USERNAME)[0]["username"]
        self.assertEqual(self.chat_server.get_username("c1"), assigned)

    async def test_roster_lists_every_connection(self):
        """Test roster contents after three connects."""
        writers = {cid: FakeWriter() for cid in ("c1", "c2", "c3")}
        for cid, writer in writers.items():
            await self.chat_server.handle_connect(cid, writer)

        assigned = {writer.of_type(EventTypes.ASSIGNED_USERNAME)[0]["username"] for writer in writers.values()}
        roster = writers["c1"].of_type(EventTypes.ONLINE_USERS)[-1]["users"]

        self.assertEqual(len(roster), 3)
        self.assertEqual(set(roster), assigned)
        self.assertEqual(self.chat_server.get_participant_count(), 3)

    async def test_disconnect_releases_and_announces(self):
        """Test that a disconnect frees the username and tells the others."""
        w1, w2 = FakeWriter(), FakeWriter()
        await self.chat_server.handle_connect("c1", w1)
        await self.chat_server.handle_connect("c2", w2)
        w1.frames.clear()
        w2.frames.clear()

        await self.chat_server.handle_disconnect("c1")

        self.assertEqual(w2.messages, [
            {"type": EventTypes.ONLINE_USERS, "users": ["Noman"]},
            {"type": EventTypes.USER_LEFT, "username": "Bilal", "message": "Bilal has left the chat"},
        ])
        self.assertEqual(w1.messages, [])
        self.assertIsNone(self.chat_server.get_username("c1"))
        self.assertFalse(self.chat_server.username_pool.is_used("Bilal"))
        self.assertEqual(self.chat_server.username_pool.assign(), "Bilal")

    async def test_disconnect_of_unknown_connection_is_silent(self):
        """Test that disconnecting an unregistered id broadcasts nothing."""
        writer = FakeWriter()
        await self.chat_server.handle_connect("c1", writer)
        writer.frames.clear()

        await self.chat_server.handle_disconnect("ghost")
        await self.chat_server.handle_disconnect("ghost")

        self.assertEqual(writer.messages, [])
        self.assertEqual(self.chat_server.get_online_users(), ["Bilal"])

    async def test_double_disconnect_releases_once(self):
        """Test that a repeated disconnect does not free a reassigned name."""
        await self.chat_server.handle_connect("c1", FakeWriter())
        await self.chat_server.handle_disconnect("c1")
        await self.chat_server.handle_connect("c2", FakeWriter())

        await self.chat_server.handle_disconnect("c1")

        self.assertEqual(self.chat_server.get_username("c2"), "Bilal")
        self.assertTrue(self.chat_server.username_pool.is_used("Bilal"))

    async def test_message_reaches_everyone_including_sender(self):
        """Test chat relay."""
        w1, w2 = FakeWriter(), FakeWriter()
        await self.chat_server.handle_connect("c1", w1)
        await self.chat_server.handle_connect("c2", w2)

        relayed = await self.chat_server.handle_message("c1", "hi")

        expected = {"type": EventTypes.MESSAGE, "username": "Bilal", "message": "hi", "senderId": "c1"}
        self.assertTrue(relayed)
        self.assertEqual(w1.of_type(EventTypes.MESSAGE), [expected])
        self.assertEqual(w2.of_type(EventTypes.MESSAGE), [expected])

    async def test_message_from_unknown_connection_omits_username(self):
        """Test that an unregistered sender is relayed without a username."""
        writer = FakeWriter()
        await self.chat_server.handle_connect("c1", writer)

        await self.chat_server.handle_message("ghost", "boo")

        self.assertEqual(writer.of_type(EventTypes.MESSAGE), [
            {"type": EventTypes.MESSAGE, "message": "boo", "senderId": "ghost"}
        ])

    async def test_strict_mode_drops_message_from_unknown_connection(self):
        """Test that strict mode refuses to relay unregistered senders."""
        chat_server = ChatServer(strict_messages=True)
        writer = FakeWriter()
        await chat_server.handle_connect("c1", writer)

        relayed = await chat_server.handle_message("ghost", "boo")

        self.assertFalse(relayed)
        self.assertEqual(writer.of_type(EventTypes.MESSAGE), [])

    async def test_concurrent_connects_get_distinct_usernames(self):
        """Test uniqueness when many connects race."""
        ids = [f"c{i}" for i in range(30)]
        names = await asyncio.gather(*(self.chat_server.handle_connect(cid, FakeWriter()) for cid in ids))

        self.assertEqual(len(set(names)), 30)
        self.assertEqual(sorted(self.chat_server.get_online_users()), sorted(names))

    async def test_concurrent_disconnects_keep_state_consistent(self):
        """Test that racing disconnects leave the pool and registry empty."""
        ids = [f"c{i}" for i in range(10)]
        for cid in ids:
            await self.chat_server.handle_connect(cid, FakeWriter())

        await asyncio.gather(*(self.chat_server.handle_disconnect(cid) for cid in ids + ids))

        self.assertEqual(self.chat_server.get_online_users(), [])
        self.assertEqual(self.chat_server.username_pool.list_used(), [])


class TestChatServerDelivery(unittest.IsolatedAsyncioTestCase):
    """Test cases for broadcast and unicast delivery."""

    def setUp(self):
        """Set up test fixtures."""
        self.chat_server = ChatServer(send_timeout=0.05)

    async def test_broken_connection_does_not_block_others(self):
        """Test that a failing writer is reported and others still receive."""
        good = FakeWriter()
        self.chat_server.clients = {"bad": BrokenWriter(), "good": good}

        failed = await self.chat_server.broadcast({"type": "ping"})

        self.assertEqual(failed, ["bad"])
        self.assertEqual(good.messages, [{"type": "ping"}])

    async def test_stalled_connection_times_out(self):
        """Test that a writer that never drains is cut off."""
        good = FakeWriter()
        self.chat_server.clients = {"slow": StalledWriter(), "good": good}

        failed = await self.chat_server.broadcast({"type": "ping"})

        self.assertEqual(failed, ["slow"])
        self.assertEqual(good.messages, [{"type": "ping"}])

    async def test_failed_connection_is_evicted_and_closed(self):
        """Test that a writer that fails once receives nothing further."""
        bad, good = BrokenWriter(), FakeWriter()
        self.chat_server.clients = {"bad": bad, "good": good}

        await self.chat_server.broadcast({"type": "ping"})
        failed = await self.chat_server.broadcast({"type": "pong"})

        self.assertEqual(failed, [])
        self.assertNotIn("bad", self.chat_server.clients)
        self.assertTrue(bad.closed)
        self.assertEqual(good.messages, [{"type": "ping"}, {"type": "pong"}])

    async def test_stalled_connection_delays_only_one_event(self):
        """Test that consecutive events after a stall run at full speed."""
        chat_server = ChatServer(send_timeout=0.2)
        good, slow = FakeWriter(), StalledWriter()
        await chat_server.handle_connect("good", good)
        await chat_server.handle_connect("slow", FakeWriter())
        # Peer stops reading after joining
        chat_server.clients["slow"] = slow

        loop = asyncio.get_running_loop()
        started = loop.time()
        for i in range(5):
            await chat_server.handle_message("good", f"msg {i}")
        elapsed = loop.time() - started

        self.assertLess(elapsed, 0.6)
        self.assertNotIn("slow", chat_server.clients)
        self.assertTrue(slow.closed)
        self.assertEqual(len(good.of_type(EventTypes.MESSAGE)), 5)

    async def test_evicted_connection_still_leaves_once(self):
        """Test that the later disconnect of an evicted connection is announced once."""
        good, bad = FakeWriter(), BrokenWriter()
        await self.chat_server.handle_connect("good", good)
        await self.chat_server.handle_connect("bad", bad)
        self.assertEqual(self.chat_server.get_username("bad"), "Noman")
        good.frames.clear()

        await self.chat_server.handle_disconnect("bad")
        await self.chat_server.handle_disconnect("bad")

        self.assertEqual(good.of_type(EventTypes.USER_LEFT), [
            {"type": EventTypes.USER_LEFT, "username": "Noman", "message": "Noman has left the chat"}
        ])
        self.assertFalse(self.chat_server.username_pool.is_used("Noman"))

    async def test_send_message_to_unknown_connection(self):
        """Test unicast to a missing connection."""
        self.assertFalse(await self.chat_server.send_message("ghost", {"type": "ping"}))

    async def test_broadcast_without_clients(self):
        """Test broadcast with nobody connected."""
        self.assertEqual(await self.chat_server.broadcast({"type": "ping"}), [])

    async def test_connect_survives_broken_writer(self):
        """Test that a connection whose writes fail still gets registered."""
        username = await self.chat_server.handle_connect("c1", BrokenWriter())

        self.assertEqual(username, "Bilal")
        self.assertEqual(self.chat_server.get_username("c1"), "Bilal")


if __name__ == '__main__':
    unittest.main()
