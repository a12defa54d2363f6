"""modules/planning: skeleton prompt + repair, time slots, geo sequencing, orchestration."""
