from abc import abstractmethod


class Conduit:
    """
    A conduit allows two-way communication of whole frames with a single peer.
    Text frames are str, binary frames are bytes.
    """

    @property
    @abstractmethod
    def target(self):
        """ describes the peer, such as the remote address. """
        raise NotImplementedError

    @abstractmethod
    def receive(self, timeout=None):
        """
        Waits for the next frame.
        :param timeout: how long to wait in seconds. None waits indefinitely.
        :return: the next frame, or None when the peer has closed the conduit.
        :raises TimeoutError: no frame arrived within the timeout. The conduit remains open.
        """
        raise NotImplementedError

    @abstractmethod
    def send(self, frame):
        """
        Sends a frame to the peer.
        :raises TransportError: when the frame could not be written.
        """
        raise NotImplementedError

    @property
    @abstractmethod
    def open(self) -> bool:
        """ determines if this conduit is open. When open, frames can be sent and received."""
        raise NotImplementedError

    @abstractmethod
    def close(self):
        raise NotImplementedError


class ConduitDecorator(Conduit):
    """
    Wraps another conduit and delegates to it. Subclasses override the calls they intercept.
    """

    def __init__(self, decorate: Conduit):
        self.decorate = decorate

    @property
    def target(self):
        return self.decorate.target

    def receive(self, timeout=None):
        return self.decorate.receive(timeout)

    def send(self, frame):
        self.decorate.send(frame)

    @property
    def open(self) -> bool:
        return self.decorate.open

    def close(self):
        self.decorate.close()


class LoggingConduit(ConduitDecorator):
    """
    Logs each frame received and sent at debug level.
    """
    def __init__(self, decorate: Conduit, logger):
        super().__init__(decorate)
        self.logger = logger

    def receive(self, timeout=None):
        frame = super().receive(timeout)
        if frame is not None:
            self.logger.debug("%s -> %r" % (self.target, frame))
        return frame

    def send(self, frame):
        self.logger.debug("%s <- %r" % (self.target, frame))
        super().send(frame)

