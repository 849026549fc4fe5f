"""StudyHub study timer backend"""
