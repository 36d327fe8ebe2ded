"""
EduManage: course, student, instructor and enrollment management with a
self-repairing local data store.
"""
