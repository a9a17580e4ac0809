"""

Player telemetry receiver

A companion extension running inside the Spotify client connects to a local WebSocket
and pushes "now playing" updates. This package accepts that connection, decodes the frames
into events and hands them to the application.

- Codec: converts a text frame to an Event (TrackChanged, StateChanged, ProgressChanged) and
  control messages (ProgressUpdateInterval) to frames. DelimitedCodec speaks the tagged
  positional grammar (`STATE_CHANGED;2`), JsonCodec the structured one (`{"StateChanged": 2}`).
- Conduit: a frame channel to one peer. WebSocketConduit runs over a handshaken socket.
- Connection: one producer. receive_next() decodes the next frame; send_control() talks back.
- Listener: owns the bound socket (127.0.0.1:19532 by default) and accepts one connection at a time.
  A lost connection or failed handshake never ends the listener.
- ListenSession: the accept/receive state machine, IDLE -> ACCEPTING -> CONNECTED -> ACCEPTING...
  until the listener's CancellationToken is cancelled.


## Delivery

Two ways to consume the events, both driven by the same session:

- blocking: `for event in listener.incoming(): ...` runs on the calling thread.
- shared handle: HandleLoop runs the session on a daemon thread and merges events into a Handle.
  Readers call handle.read() from any thread; the read never blocks, returning the previously
  observed snapshot while the writer holds the lock. Events are also queued on HandleLoop.events
  for consumers to publish() on their own thread.


## Cancellation

Listener.close() cancels the token. It is polled before each accept and each receive.
Blocking socket calls are bounded by the listener's poll_interval, so loops stop within that
interval rather than waiting for the next frame from the player.

"""
