"""
weektable: search a lecture catalog and assemble weekly timetables.
"""
