'''
Copyright 2025 Advanced Micro Devices, Inc.
All rights reserved. This notice is intended as a precaution against inadvertent publication and does not imply publication or any waiver of confidentiality.
The year included in the foregoing notice is the year of creation of the work.
All code contained here is Property of Advanced Micro Devices, Inc.
'''

import os


class Env:
    """
    Ordered, immutable set of environment variables for child processes.

    Every mutation returns a new Env, so a caller's environment can be
    layered on (set a variable, prefix an existing one) without ever
    being modified in place.

    Example:
      env = Env.from_os().prefix('PATH', '/opt/go/bin:').set('GOROOT', '/opt/go')
      subprocess.run(cmd, env=env.collapse())
    """

    def __init__(self, items=()):
        self._items = tuple((str(k), str(v)) for k, v in items)

    @classmethod
    def from_os(cls):
        return cls(os.environ.items())

    @classmethod
    def from_dict(cls, env_dict):
        return cls(env_dict.items())

    def lookup(self, name):
        """Return the value of name, or None if it is not set."""
        for key, value in self._items:
            if key == name:
                return value
        return None

    def set(self, name, value):
        """Return a new Env with name set to value, replacing any existing value in place."""
        if not name or '=' in name:
            raise ValueError(f'invalid environment variable name: {name!r}')
        items = []
        found = False
        for key, old in self._items:
            if key == name:
                items.append((key, value))
                found = True
            else:
                items.append((key, old))
        if not found:
            items.append((name, value))
        return Env(items)

    def must_set(self, assignment):
        """Like set, but takes a single 'NAME=value' string."""
        name, sep, value = assignment.partition('=')
        if not sep:
            raise ValueError(f'expected NAME=value, got {assignment!r}')
        return self.set(name, value)

    def prefix(self, name, value):
        """Return a new Env with value prepended to name; sets it if absent."""
        current = self.lookup(name)
        if current is None:
            return self.set(name, value)
        return self.set(name, value + current)

    def update(self, env_dict):
        env = self
        for name, value in env_dict.items():
            env = env.set(name, value)
        return env

    def collapse(self):
        """Flatten to the dict form subprocess expects."""
        return dict(self._items)

    def items(self):
        return self._items

    def __len__(self):
        return len(self._items)

    def __eq__(self, other):
        if not isinstance(other, Env):
            return NotImplemented
        return self._items == other._items

    def __hash__(self):
        return hash(self._items)

    def __repr__(self):
        return f'Env({len(self._items)} vars)'
