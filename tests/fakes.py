"""Stand-ins for the thumbnail queue producer."""


class RecordingQueue:
  """Thumbnail producer that remembers every job instead of talking to a broker."""

  def __init__(self):
    self.jobs = []

  def enqueue(self, job):
    self.jobs.append(job)


class FailingQueue:
  def enqueue(self, job):
    raise ConnectionError("broker unavailable")
