from jobtracker.models.job_posting import JobPostingRow, job_postings

__all__ = ["JobPostingRow", "job_postings"]
