"""Workrelay routing: fans each accepted event out to every configured target.

Targets are pluggable: AWS Lambda functions, local JSON files, or any
object implementing the ``BaseTarget`` protocol.  Each target is paired
with a shaping rule that projects the event into the payload that target
expects.  One target's failure never affects another's delivery.
"""
