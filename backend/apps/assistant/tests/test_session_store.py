"""
Tests for SessionStore and SessionLock: ordering, isolation and eviction.
"""
import asyncio
import threading

from django.test import SimpleTestCase

from apps.assistant.session_store import SessionLock, SessionStore
from apps.assistant.state import Message, PendingInvocation


class FakeClock:
    def __init__(self, start=0.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class SessionLockTest(SimpleTestCase):

    def test_fifo_handoff(self):
        async def scenario():
            lock = SessionLock()
            order = []

            async def worker(label, hold):
                async with lock:
                    order.append(f"{label}-start")
                    await asyncio.sleep(hold)
                    order.append(f"{label}-end")

            first = asyncio.create_task(worker('a', 0.05))
            await asyncio.sleep(0)
            second = asyncio.create_task(worker('b', 0))
            await asyncio.sleep(0)
            third = asyncio.create_task(worker('c', 0))
            await asyncio.gather(first, second, third)
            return order, lock.locked()

        order, still_locked = asyncio.run(scenario())
        self.assertEqual(order, ['a-start', 'a-end', 'b-start', 'b-end', 'c-start', 'c-end'])
        self.assertFalse(still_locked)

    def test_cancelled_waiter_leaves_the_queue(self):
        async def scenario():
            lock = SessionLock()
            await lock.acquire()
            waiter = asyncio.create_task(lock.acquire())
            await asyncio.sleep(0)
            waiter.cancel()
            with self.assertRaises(asyncio.CancelledError):
                await waiter
            lock.release()
            return lock.locked()

        self.assertFalse(asyncio.run(scenario()))

    def test_handoff_across_event_loops(self):
        lock = SessionLock()
        held = threading.Event()
        let_go = threading.Event()

        def holder():
            async def run():
                await lock.acquire()
                held.set()
                await asyncio.get_running_loop().run_in_executor(None, let_go.wait, 2)
                lock.release()
            asyncio.run(run())

        thread = threading.Thread(target=holder)
        thread.start()
        self.assertTrue(held.wait(2))

        async def waiter():
            acquire = asyncio.ensure_future(lock.acquire())
            await asyncio.sleep(0.02)
            blocked = not acquire.done()
            let_go.set()
            await asyncio.wait_for(acquire, timeout=2)
            lock.release()
            return blocked

        self.assertTrue(asyncio.run(waiter()))
        thread.join(2)
        self.assertFalse(lock.locked())


class SessionStoreTest(SimpleTestCase):

    def setUp(self):
        self.clock = FakeClock()
        self.store = SessionStore(ttl_seconds=60, max_sessions=3, clock=self.clock)

    def test_unseen_session_is_empty(self):
        session = asyncio.run(self.store.get('new'))
        self.assertEqual(session.messages, [])
        self.assertIsNone(session.pending)

    def test_append_and_history(self):
        asyncio.run(self.store.append('s1', Message.user('hello')))
        asyncio.run(self.store.append('s1', Message.assistant('hi')))
        history = asyncio.run(self.store.history('s1'))
        self.assertEqual([m.content for m in history], ['hello', 'hi'])

    def test_get_returns_a_detached_copy(self):
        asyncio.run(self.store.append('s1', Message.user('hello')))
        snapshot = asyncio.run(self.store.get('s1'))
        snapshot.messages.append(Message.user('not stored'))
        self.assertEqual(len(asyncio.run(self.store.history('s1'))), 1)

    def test_clear_is_idempotent(self):
        asyncio.run(self.store.append('s1', Message.user('hello')))
        asyncio.run(self.store.set_pending('s1', PendingInvocation('viewAlerts')))
        asyncio.run(self.store.clear('s1'))
        asyncio.run(self.store.clear('s1'))
        asyncio.run(self.store.clear('never-seen'))
        session = asyncio.run(self.store.get('s1'))
        self.assertEqual(session.messages, [])
        self.assertIsNone(session.pending)

    def test_turns_in_one_session_are_serialized(self):
        async def scenario():
            order = []

            async def turn(label):
                async with self.store.session('s1') as session:
                    order.append(f"{label}-start")
                    await asyncio.sleep(0.01)
                    session.append(Message.user(label))
                    order.append(f"{label}-end")

            await asyncio.gather(turn('a'), turn('b'), turn('c'))
            return order

        order = asyncio.run(scenario())
        self.assertEqual(order, ['a-start', 'a-end', 'b-start', 'b-end', 'c-start', 'c-end'])

    def test_sessions_do_not_block_each_other(self):
        async def scenario():
            release = asyncio.Event()

            async def hold_s1():
                async with self.store.session('s1'):
                    await release.wait()

            holder = asyncio.create_task(hold_s1())
            await asyncio.sleep(0)
            await asyncio.wait_for(self.store.append('s2', Message.user('hi')), timeout=1)
            release.set()
            await holder

        asyncio.run(scenario())
        self.assertIn('s2', self.store)

    def test_idle_sessions_expire(self):
        asyncio.run(self.store.append('s1', Message.user('hello')))
        self.clock.advance(61)
        self.assertNotIn('s1', self.store)
        self.assertEqual(asyncio.run(self.store.history('s1')), [])

    def test_activity_extends_ttl(self):
        asyncio.run(self.store.append('s1', Message.user('hello')))
        self.clock.advance(50)
        asyncio.run(self.store.append('s1', Message.user('again')))
        self.clock.advance(50)
        self.assertIn('s1', self.store)

    def test_sweep_skips_sessions_in_use(self):
        async def scenario():
            await self.store.append('idle', Message.user('x'))
            async with self.store.session('busy'):
                self.clock.advance(120)
                return self.store.sweep()

        removed = asyncio.run(scenario())
        self.assertEqual(removed, 1)
        self.assertNotIn('idle', self.store)
        self.assertEqual(len(self.store), 1)

    def test_capacity_evicts_least_recently_active(self):
        for index, session_id in enumerate(['s1', 's2', 's3']):
            self.clock.now = index
            asyncio.run(self.store.append(session_id, Message.user('hi')))
        self.clock.now = 10
        asyncio.run(self.store.append('s1', Message.user('still here')))
        asyncio.run(self.store.append('s4', Message.user('hi')))

        self.assertEqual(len(self.store), 3)
        self.assertNotIn('s2', self.store)
        for session_id in ('s1', 's3', 's4'):
            self.assertIn(session_id, self.store)

    def test_capacity_never_evicts_a_session_in_use(self):
        async def scenario():
            async with self.store.session('busy'):
                for session_id in ('s2', 's3', 's4'):
                    self.clock.advance(1)
                    await self.store.append(session_id, Message.user('hi'))
                return 'busy' in self.store

        self.assertTrue(asyncio.run(scenario()))
        self.assertNotIn('s2', self.store)
