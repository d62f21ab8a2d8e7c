"""
Pytest configuration and shared fixtures for testing.
"""
import pytest
import os
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


SEMESTER_INDEX_YAML = """
semesters:
  - name: Spring 2024
    file: spring-2024.yaml
  - name: Fall 2024
    file: fall-2024.yaml
    current: true
"""

FALL_2024_YAML = """
semester:
  name: Fall 2024
  start-date: 2024-08-25
  end-date: 2024-12-14
  gig-requirement: 1
members:
  - member@example.com
  - other@example.com
events:
  - id: 1
    name: Weekly Rehearsal
    type: Rehearsal
    call-time: 2024-09-03T18:00:00
    release-time: 2024-09-03T20:00:00
    points: 10
  - id: 2
    name: Tenor Sectional
    type: Sectional
    call-time: 2024-09-04T19:00:00
    points: 5
  - id: 3
    name: Football Game
    type: Volunteer Gig
    call-time: 2024-09-07T12:00:00
    points: 10
    gig-count: true
  - id: 4
    name: Fall Concert
    type: Tutti Gig
    call-time: 2024-09-12T19:00:00
    points: 35
attendance:
  - {member: member@example.com, event: 1, should-attend: true, did-attend: true, minutes-late: 30}
  - {member: member@example.com, event: 2, should-attend: true, did-attend: false}
  - {member: member@example.com, event: 3, should-attend: false, did-attend: true}
  - {member: member@example.com, event: 4, should-attend: true, did-attend: false}
  - {member: other@example.com, event: 1, should-attend: true, did-attend: false}
  - {member: other@example.com, event: 2, should-attend: true, did-attend: true}
  - {member: other@example.com, event: 3, should-attend: false, did-attend: false}
  - {member: other@example.com, event: 4, should-attend: true, did-attend: true}
absence-requests:
  - member: other@example.com
    event: 1
    state: approved
    reason: Exam
    time: 2024-09-01T10:00:00
"""

SPRING_2024_YAML = """
semester:
  name: Spring 2024
  start-date: 2024-01-07
  end-date: 2024-05-04
members:
  - member@example.com
events:
  - id: 10
    type: Rehearsal
    call-time: 2024-01-09T18:00:00
    points: 10
attendance: []
"""


@pytest.fixture
def semesters_dir(tmp_path):
    """Directory with a semester index and two semester files."""
    (tmp_path / "index.yaml").write_text(SEMESTER_INDEX_YAML, encoding="utf-8")
    (tmp_path / "fall-2024.yaml").write_text(FALL_2024_YAML, encoding="utf-8")
    (tmp_path / "spring-2024.yaml").write_text(SPRING_2024_YAML, encoding="utf-8")
    return tmp_path
