from pagesampler.job.runner import Sampler, SampleOutcome, SamplingSummary, build_sampler

__all__ = ["Sampler", "SampleOutcome", "SamplingSummary", "build_sampler"]
